"""Background color parsing for the alpha blend step."""

from .error_handling import InvalidColorSpec

NAMED_BACKGROUNDS: dict[str, tuple[float, float, float]] = {
    "black": (0.0, 0.0, 0.0),
    "white": (1.0, 1.0, 1.0),
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def parse_background_color(spec: str) -> tuple[float, float, float]:
    """Parse ``"black"``, ``"white"`` or ``"#RRGGBB"`` into normalized RGB.

    Raises:
        InvalidColorSpec: If *spec* is none of the recognized forms.
    """
    if spec in NAMED_BACKGROUNDS:
        return NAMED_BACKGROUNDS[spec]

    if len(spec) != 7 or spec[0] != "#" or not set(spec[1:]) <= _HEX_DIGITS:
        raise InvalidColorSpec(
            f"Invalid background color {spec!r}: expected 'black', 'white' or '#RRGGBB'",
            context={"background": spec},
        )

    color = int(spec[1:], 16)
    return (
        ((color >> 16) & 0xFF) / 255.0,
        ((color >> 8) & 0xFF) / 255.0,
        (color & 0xFF) / 255.0,
    )

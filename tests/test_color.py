"""Tests for decodelab.color module."""

import pytest

from decodelab.color import parse_background_color
from decodelab.error_handling import InvalidColorSpec


class TestParseBackgroundColor:
    """Tests for parse_background_color."""

    @pytest.mark.fast
    def test_named_colors(self):
        """Test the two named backgrounds."""
        assert parse_background_color("black") == (0.0, 0.0, 0.0)
        assert parse_background_color("white") == (1.0, 1.0, 1.0)

    @pytest.mark.fast
    def test_hex_color(self):
        """Test #RRGGBB is normalized channel by channel."""
        r, g, b = parse_background_color("#ff8000")

        assert r == 1.0
        assert g == pytest.approx(128 / 255)
        assert round(g, 3) == 0.502
        assert b == 0.0

    @pytest.mark.fast
    def test_hex_color_is_case_insensitive(self):
        assert parse_background_color("#ABCDEF") == parse_background_color("#abcdef")

    @pytest.mark.fast
    @pytest.mark.parametrize(
        "spec",
        ["", "red", "#fff", "#ff80001", "ff8000", "#gg0000", "#ff 800", "Black"],
    )
    def test_invalid_specs_raise(self, spec):
        """Test anything other than black, white or #RRGGBB is rejected."""
        with pytest.raises(InvalidColorSpec) as exc_info:
            parse_background_color(spec)

        assert exc_info.value.context["background"] == spec

from .pillow import PillowDecoder

__all__ = [
    "PillowDecoder",
]

"""decodelab - decode compressed image bitstreams to pixels or lossless JPEG."""

__version__ = "0.1.0"

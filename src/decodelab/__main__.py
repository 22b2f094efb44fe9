"""Allow ``python -m decodelab``."""

from .cli import main

if __name__ == "__main__":
    main()

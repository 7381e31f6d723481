"""Entry point for python -m py_image_squash."""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())

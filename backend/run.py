#!/usr/bin/env python3
"""
Render a carousel from a text file without installing the package.

    python run.py post.txt -o carousel.zip
"""

import sys

from carousel.cli import main

if __name__ == "__main__":
    sys.exit(main())

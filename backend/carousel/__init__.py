"""Carousel image rendering engine: text in, fitted slide images out."""

__version__ = "1.0.0"

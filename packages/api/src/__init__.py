# This project was developed with assistance from AI tools.
"""Gryork case lifecycle API."""

__version__ = "0.1.0"

"""jlinstall — install, list and remove Julia releases."""

__version__ = "0.1.0"

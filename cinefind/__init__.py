"""CineFind - look up movies from your terminal."""

__version__ = "1.0.0"

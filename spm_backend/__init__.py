"""Swift Package Manager source-build backend."""

__version__ = "0.1.0"

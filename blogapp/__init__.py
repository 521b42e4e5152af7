"""Content catalog and publishing engine for a blog backend."""

__version__ = "0.1.0"

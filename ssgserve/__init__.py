"""A multi-worker static file HTTP server for static site output."""

__version__ = "0.1.0"
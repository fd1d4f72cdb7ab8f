"""Property settlement: orchestration of the post-agreement sale lifecycle."""

__version__ = "0.1.0"

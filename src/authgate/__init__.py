"""authgate: single-account login gate in front of a static HTML app."""

__version__ = "0.1.0"

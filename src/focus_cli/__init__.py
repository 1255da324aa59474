"""focus-cli - track focus sessions from the command line."""

__version__ = "0.1.0"

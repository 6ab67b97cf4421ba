"""Version information for dex-access."""

__version__ = "0.3.0"

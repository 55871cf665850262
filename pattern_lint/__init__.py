"""Pattern-based source analysis toolkit."""

__version__ = "0.3.0"

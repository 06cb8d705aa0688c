"""repotree: turn a directory tree into a token-counted, filterable text export."""

__version__ = "1.0.0"

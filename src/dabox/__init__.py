"""dabox - browse and edit a remote per-user directory tree."""

__version__ = "0.1.0"

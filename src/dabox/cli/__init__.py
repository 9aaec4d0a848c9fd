"""Command line interface for dabox."""

"""Command line interface for tabkey."""

"""Command-line interface for SeeksyTV."""

"""Command line interface for booktrans."""

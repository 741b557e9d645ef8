"""Command line interface for the GitHub PR bot."""

"""Command-line runners."""

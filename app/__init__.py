"""Front-end helpers for the advisor."""

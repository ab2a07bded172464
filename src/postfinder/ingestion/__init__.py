"""Markdown post loading."""

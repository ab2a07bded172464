"""PostFinder - fuzzy search index for a markdown blog."""

__version__ = "0.1.0"

"""Index building, storage, watching and search."""

"""Incremental geocoding map for detected addresses."""

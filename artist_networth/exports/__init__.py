"""Exports: CSV writer for batch net worth lookups."""

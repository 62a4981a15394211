"""JSON Schemas bundled as package data."""

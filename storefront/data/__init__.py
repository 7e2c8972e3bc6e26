"""Catalog data models and content schemas."""

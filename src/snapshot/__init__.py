# src/snapshot/__init__.py — v1
"""Catalog snapshot persistence backends."""

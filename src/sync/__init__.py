# src/sync/__init__.py — v1
"""Change detection and reconciliation of the local PDF collection."""

# src/export/__init__.py — v1
"""Packaging of rendered PDFs (zip archive, merged PDF)."""

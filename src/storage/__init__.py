# src/storage/__init__.py — v1
"""Output directory layout, workspace mutations and session lock."""

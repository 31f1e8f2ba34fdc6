# src/config/__init__.py — v1
"""Settings, configuration profiles and command-line options."""

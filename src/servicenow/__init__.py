# src/servicenow/__init__.py — v1
"""ServiceNow adapters: Table API catalog client and browser renderer."""

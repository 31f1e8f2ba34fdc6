# src/__init__.py — v1
"""pdfetch — export ServiceNow KB articles as PDF files and track catalog changes."""

# backend/filevault/__init__.py
"""Upload ingestion service that hashes stored files off the request path."""

__version__ = "0.1.0"

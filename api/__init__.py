"""
FastAPI application for stock sheet imports.

This package contains the REST API for uploading stock and price sheets
and editing the imported items.
"""

__version__ = "1.0.0"

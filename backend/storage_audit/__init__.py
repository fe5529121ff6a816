"""Blob storage usage reporting for Azure storage accounts."""

__version__ = "1.0.0"

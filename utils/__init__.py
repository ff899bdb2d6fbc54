"""Utility modules for the document Q&A client."""

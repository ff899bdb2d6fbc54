"""Tests for the document Q&A client."""

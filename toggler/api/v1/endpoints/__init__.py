"""Endpoint modules."""

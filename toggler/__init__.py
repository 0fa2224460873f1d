"""Toggler: feature toggle state registry with change notification."""

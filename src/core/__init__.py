"""Shared errors."""

"""Logging setup and contextual fields."""

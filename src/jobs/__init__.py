"""Comparison jobs."""

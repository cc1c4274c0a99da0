"""On-disk layout, entry markers and locks."""

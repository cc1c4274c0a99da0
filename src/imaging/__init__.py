"""Raster grids, highlight colors and the page diff engine."""

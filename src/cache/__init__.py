"""Content hashing and the raster page cache."""

"""External rasterizer adapters and page discovery."""

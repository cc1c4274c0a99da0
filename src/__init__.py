"""pdfdiff: highlight the differences between two PDF files."""

from pdfdiff.version import __version__

__all__ = ["__version__"]

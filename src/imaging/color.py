# src/imaging/color.py
"""Highlight color parsing.

The color is converted once per job and passed explicitly to every diff call,
so concurrent jobs with different colors never share state.
"""

from __future__ import annotations

import string
from dataclasses import dataclass

DEFAULT_HIGHLIGHT = "ff2010"


@dataclass(frozen=True)
class HighlightColor:
    """Target tint as three floating-point channel values in [0, 255]."""

    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, value: str) -> HighlightColor:
        """Parse a 6-digit hex RGB triple such as ``ff2010`` or ``#ff2010``."""
        text = value.strip().lstrip("#")
        if len(text) != 6 or not all(c in string.hexdigits for c in text):
            raise ValueError(f"Invalid hex color: {value!r}")
        packed = int(text, 16)
        return cls(
            r=float(packed >> 16),
            g=float((packed >> 8) & 0xFF),
            b=float(packed & 0xFF),
        )

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        return f"{int(self.r):02x}{int(self.g):02x}{int(self.b):02x}"

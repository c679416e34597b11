"""Glyph palette and brightness quantization."""

import math
from dataclasses import dataclass

import numpy as np

DEFAULT_GLYPHS = " .,:;i1tfLCG08@"


def _check_palette_size(palette_size: int) -> None:
    if palette_size < 2:
        raise ValueError(f"Palette needs at least 2 glyphs, got {palette_size}")


def quantize(brightness: float, palette_size: int) -> int:
    """Map a normalized brightness to a palette index.

    Brightness is clamped to [0, 1] first, so 0.0 is always index 0 and
    1.0 is always the last index.
    """
    _check_palette_size(palette_size)
    brightness = min(max(brightness, 0.0), 1.0)
    index = math.floor(brightness * (palette_size - 1))
    return min(max(index, 0), palette_size - 1)


def quantize_matrix(matrix: np.ndarray, palette_size: int) -> np.ndarray:
    """Vectorised `quantize` over a whole brightness matrix."""
    _check_palette_size(palette_size)
    clamped = np.clip(matrix, 0.0, 1.0)
    indices = np.floor(clamped * (palette_size - 1)).astype(np.intp)
    return np.clip(indices, 0, palette_size - 1)


@dataclass(frozen=True)
class GlyphPalette:
    """Ordered glyphs, index 0 darkest."""
    glyphs: str = DEFAULT_GLYPHS

    def __post_init__(self):
        _check_palette_size(len(self.glyphs))

    def __len__(self) -> int:
        return len(self.glyphs)

    def glyph_for(self, brightness: float) -> str:
        return self.glyphs[quantize(brightness, len(self.glyphs))]

    def render(self, matrix: np.ndarray) -> str:
        """Render a brightness matrix as rows of glyphs joined by newlines."""
        lookup = np.array(list(self.glyphs))
        glyph_rows = lookup[quantize_matrix(matrix, len(self.glyphs))]
        return "\n".join("".join(row) for row in glyph_rows)

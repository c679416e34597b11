"""Output geometry derived from the source video."""

import math

from pydantic import BaseModel, ConfigDict, Field

# Glyph cells are roughly twice as tall as they are wide
GLYPH_ASPECT = 0.5


class VideoGeometry(BaseModel):
    """Source dimensions and the glyph grid they map to."""
    model_config = ConfigDict(frozen=True)

    source_width: int = Field(..., gt=0)
    source_height: int = Field(..., gt=0)
    source_fps: float = Field(..., gt=0)
    output_width: int = Field(..., gt=0)
    output_height: int = Field(..., ge=1)

    @classmethod
    def from_source(cls, source_width: int, source_height: int, source_fps: float, output_width: int) -> "VideoGeometry":
        if source_width <= 0 or source_height <= 0:
            raise ValueError(f"Invalid source dimensions: {source_width}x{source_height}")
        if output_width <= 0:
            raise ValueError(f"Output width must be positive, got {output_width}")

        output_height = math.floor(output_width * source_height / source_width * GLYPH_ASPECT)
        if output_height < 1:
            raise ValueError(
                f"Output width {output_width} is too small for a {source_width}x{source_height} source "
                f"(derived height {output_height})"
            )
        return cls(
            source_width=source_width,
            source_height=source_height,
            source_fps=source_fps,
            output_width=output_width,
            output_height=output_height,
        )

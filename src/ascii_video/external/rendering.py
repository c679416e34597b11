"""Render glyph text frames back to images with Pillow."""

import logging

from PIL import Image, ImageDraw, ImageFont

from ascii_video.ascii_frames.converter import ConversionOutcome, FrameStatus
from ascii_video.ascii_frames.inventory import FrameRecord

logger = logging.getLogger(__name__)

TEXT_OFFSET = (5, 5)


def render_text_frame(text: str, width: int, height: int, font: ImageFont.ImageFont | None = None) -> Image.Image:
    """Draw white monospace text on a black canvas of the given size."""
    img = Image.new("RGB", (width, height), "black")
    draw = ImageDraw.Draw(img)
    draw.multiline_text(TEXT_OFFSET, text, fill="white", font=font or ImageFont.load_default(), spacing=0)
    return img


class FrameRenderer:
    """Render frame_NNNNN.txt to frame_NNNNN_ascii.png, skipping existing images."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.font = ImageFont.load_default()

    def render_if_needed(self, record: FrameRecord) -> ConversionOutcome:
        if record.image_path.exists():
            return ConversionOutcome(record, FrameStatus.SKIPPED)

        tmp_path = record.image_path.with_name(f".{record.image_path.name}.tmp")
        try:
            text = record.text_path.read_text(encoding="utf-8")
            img = render_text_frame(text, self.width, self.height, self.font)
            img.save(tmp_path, format="PNG")
            tmp_path.replace(record.image_path)
        except (OSError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            logger.warning(f"Failed to render {record.text_path.name}: {e}")
            return ConversionOutcome(record, FrameStatus.FAILED, str(e))

        return ConversionOutcome(record, FrameStatus.CONVERTED)

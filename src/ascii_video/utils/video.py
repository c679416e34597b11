import logging
from typing import Any

import ffmpeg
from pydantic import BaseModel, Field

from ascii_video.utils.dependencies import ExternalToolError

logger: logging.Logger = logging.getLogger(__name__)


class VideoInfo(BaseModel):
    """Video information extracted from ffprobe."""

    width: int = Field(..., gt=0, description="Video width in pixels")
    height: int = Field(..., gt=0, description="Video height in pixels")
    fps: float = Field(..., gt=0, description="Frames per second")
    duration: float = Field(0.0, ge=0, description="Duration in seconds (0 if unknown)")
    has_audio: bool = Field(False, description="Whether the container has an audio stream")


def parse_frame_rate(fps_str: str) -> float:
    if isinstance(fps_str, str) and '/' in fps_str:
        num, denom = map(int, fps_str.split('/'))
        return num / denom
    return float(fps_str)


def get_video_info(filename: str) -> VideoInfo:
    try:
        probe = ffmpeg.probe(filename)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="ignore").strip() if e.stderr else ""
        logger.error(f"Error detecting video parameters: {stderr}")
        raise ExternalToolError(f"ffprobe could not read {filename}")

    streams: list[Any] = probe.get('streams', [])
    video_streams = [s for s in streams if s.get('codec_type') == 'video']
    if not video_streams:
        raise ValueError(f"No video stream found in {filename}")
    stream = video_streams[0]

    video_info = VideoInfo(
        width=stream['width'],
        height=stream['height'],
        fps=parse_frame_rate(stream['r_frame_rate']),
        duration=float(stream.get('duration') or probe.get('format', {}).get('duration') or 0.0),
        has_audio=any(s.get('codec_type') == 'audio' for s in streams),
    )

    duration_str = f", {video_info.duration:.2f}s" if video_info.duration > 0 else ""
    audio_str = "" if video_info.has_audio else ", no audio"
    logger.info(
        f"Video detected: {video_info.width}x{video_info.height}, "
        f"{video_info.fps:.2f} fps{duration_str}{audio_str}"
    )
    return video_info

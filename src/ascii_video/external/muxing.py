"""Encode rendered frames and mux them with the processed audio."""

import logging
from pathlib import Path

import ffmpeg

from ascii_video.ascii_frames.inventory import FRAME_PREFIX, IMAGE_SUFFIX
from ascii_video.external.extraction import run_stream

logger = logging.getLogger(__name__)


def encode_frames(frames_dir: Path, output_file: Path, fps: float) -> None:
    """Encode every frame_*_ascii.png (glob order) into an H.264 video without audio."""
    pattern = str(Path(frames_dir) / f"{FRAME_PREFIX}*{IMAGE_SUFFIX}")
    stream = ffmpeg.input(pattern, pattern_type="glob", framerate=fps).output(
        str(output_file),
        vcodec="libx264",
        preset="ultrafast",
        pix_fmt="yuv420p",
        loglevel="error",
    )
    run_stream(stream, "encoding ASCII frames")


def combine_video_audio(video_file: Path, audio_file: Path | None, output_file: str, audio_bitrate: str) -> None:
    """Mux video with AAC audio, or copy the video stream alone when there is no audio."""
    video_input = ffmpeg.input(str(video_file))
    if audio_file is None:
        stream = ffmpeg.output(video_input, output_file, vcodec="copy", loglevel="error")
    else:
        audio_input = ffmpeg.input(str(audio_file))
        stream = ffmpeg.output(
            video_input['v'],
            audio_input['a'],
            output_file,
            vcodec="copy",
            acodec="aac",
            audio_bitrate=audio_bitrate,
            shortest=None,
            loglevel="error",
        )
    run_stream(stream, "combining video and audio")
    logger.info(f"Output: {output_file}")

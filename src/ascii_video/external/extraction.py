"""FFmpeg wrappers for frame extraction, rasterization and audio preparation."""

import logging
from pathlib import Path

import ffmpeg

from ascii_video.ascii_frames.inventory import FRAME_PREFIX, INDEX_WIDTH, RASTER_SUFFIX
from ascii_video.utils.dependencies import ExternalToolError, run_tool

logger = logging.getLogger(__name__)

COMPAND_FILTER = {
    "attacks": "0.3",
    "decays": "1.0",
    "points": "-70/-60|-60/-40|-40/-30|-20/-20",
}


def run_stream(stream, what: str) -> None:
    try:
        ffmpeg.run(stream, overwrite_output=True, capture_stdout=True, capture_stderr=True)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="ignore").strip() if e.stderr else "Unknown error"
        logger.error(f"FFmpeg failed while {what}: {stderr}")
        raise ExternalToolError(f"FFmpeg failed while {what}")


def extract_frames(input_file: str, frames_dir: Path, fps: float, width: int, height: int) -> None:
    """Extract scaled raster frames as frame_00001.png, frame_00002.png, ..."""
    pattern = str(Path(frames_dir) / f"{FRAME_PREFIX}%0{INDEX_WIDTH}d{RASTER_SUFFIX}")
    stream = (
        ffmpeg
        .input(input_file)
        .filter("fps", fps=fps)
        .filter("scale", width, height)
        .output(pattern, loglevel="warning")
    )
    run_stream(stream, "extracting frames")


def rasterize_frame(frame_path: Path, width: int, height: int, timeout: float | None = None) -> bytes:
    """Return the frame as an 8-bit binary PGM of the given size, read from ffmpeg's stdout."""
    cmd = [
        "ffmpeg", "-hide_banner", "-loglevel", "error",
        "-i", str(frame_path),
        "-vf", f"scale={width}:{height},format=gray",
        "-frames:v", "1",
        "-f", "image2pipe", "-vcodec", "pgm",
        "-",
    ]
    return run_tool(cmd, timeout=timeout)


def extract_audio(input_file: str, work_dir: Path) -> Path:
    """Extract the audio track to PCM WAV and compress its dynamic range.

    Returns:
        Path of the processed WAV file.
    """
    audio_file = Path(work_dir) / "audio.wav"
    processed_audio = Path(work_dir) / "audio_processed.wav"

    raw = ffmpeg.input(input_file).output(str(audio_file), vn=None, acodec="pcm_s16le", loglevel="error")
    run_stream(raw, "extracting audio")

    filtered = (
        ffmpeg
        .input(str(audio_file))
        .filter("compand", **COMPAND_FILTER)
        .output(str(processed_audio), loglevel="error")
    )
    run_stream(filtered, "filtering audio")

    logger.info("Audio processed")
    return processed_audio

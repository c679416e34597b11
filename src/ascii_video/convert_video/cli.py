"""CLI command for convert."""

import logging
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ascii_video.ascii_frames.palette import DEFAULT_GLYPHS
from ascii_video.convert_video.main import DEFAULT_OUTPUT, PipelineError, main
from ascii_video.models.settings import ConversionSettings, default_workers
from ascii_video.utils.cli import (
    EXIT_INTERRUPT,
    EXIT_PIPELINE_ERROR,
    EXIT_TOOL_ERROR,
    cli_error_handler,
    setup_logging,
    stderr_console,
)
from ascii_video.utils.dependencies import ExternalToolError

console = Console()


@contextmanager
def stop_on_interrupt():
    """Turn the first Ctrl-C into a stop request honored at the next batch boundary."""
    stop_event = threading.Event()

    def request_stop(signum, frame):
        if stop_event.is_set():
            raise KeyboardInterrupt
        console.print("\n[bold yellow]Stopping after the current batch (Ctrl-C again to abort)[/bold yellow]")
        stop_event.set()

    previous = signal.signal(signal.SIGINT, request_stop)
    try:
        yield stop_event
    finally:
        signal.signal(signal.SIGINT, previous)


@cli_error_handler
def convert(
    input_file: str = typer.Argument(..., help="Path to the input video file"),
    output_file: str = typer.Argument(DEFAULT_OUTPUT, help="Path to the output video file"),
    palette: str = typer.Option(DEFAULT_GLYPHS, "--palette", help="Glyphs ordered from darkest to brightest (at least 2)"),
    width: int = typer.Option(120, "--width", "-w", help="Output width in glyph columns (default: 120)"),
    fps: float = typer.Option(30.0, "--fps", help="Output frame rate (default: 30)"),
    audio_bitrate: str = typer.Option("128k", "--audio-bitrate", help="AAC audio bitrate (default: 128k)"),
    work_dir: Path = typer.Option(Path("temp_ascii"), "--work-dir", help="Directory for intermediate frames, audio and cache"),
    frames_subdir: str = typer.Option("frames", "--frames-subdir", help="Frames directory inside the work directory"),
    cache_file: Optional[Path] = typer.Option(None, "--cache-file", help="Cache token path (default: <work-dir>/.cache)"),
    workers: int = typer.Option(default_workers(), "--workers", "-j", help="Threads used to convert frames within a batch"),
    timeout: float = typer.Option(30.0, "--timeout", help="Seconds before a per-frame ffmpeg call is treated as failed"),
    clean: bool = typer.Option(False, "--clean", help="Remove the work directory after a successful run"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """
    Convert a video into an ASCII-art video.

    Frames are extracted once per input file and cached in the work
    directory; re-running only converts frames that have no text frame yet.
    """
    setup_logging(console, verbose)
    logger = logging.getLogger(__name__)

    settings = ConversionSettings(
        palette=palette,
        output_width=width,
        output_fps=fps,
        audio_bitrate=audio_bitrate,
        work_dir=work_dir,
        frames_subdir=frames_subdir,
        cache_file=cache_file,
        workers=workers,
        tool_timeout=timeout,
        clean=clean,
    )

    logger.info(f"Input: {input_file}")
    try:
        with stop_on_interrupt() as stop_event:
            result = main(input_file, output_file, settings, stop_event)
    except PipelineError as e:
        stderr_console.print(f"[bold red]Conversion failed:[/bold red] {e}")
        raise typer.Exit(code=EXIT_PIPELINE_ERROR)
    except ExternalToolError as e:
        stderr_console.print(f"[bold red]External tool error:[/bold red] {e}")
        raise typer.Exit(code=EXIT_TOOL_ERROR)

    summary = result.conversion
    if summary.aborted or (result.rendering is not None and result.rendering.aborted):
        console.print("[bold yellow]Interrupted by user[/bold yellow], progress is kept for the next run")
        raise typer.Exit(code=EXIT_INTERRUPT)
    if summary.failed:
        console.print(f"[bold yellow]{summary.failed} of {summary.total} frames failed to convert[/bold yellow]")
    console.print(f"\n[bold green]Success![/bold green] Video saved to: {output_file}")

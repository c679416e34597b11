"""Batch scheduling of per-frame work with batch-aligned progress reporting."""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.live import Live
from rich.text import Text

from ascii_video.ascii_frames.converter import ConversionOutcome, FrameStatus
from ascii_video.ascii_frames.inventory import FrameRecord

logger = logging.getLogger(__name__)

BAR_WIDTH = 50

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class BatchSummary:
    """Aggregated outcome counts of a scheduler run."""
    total: int = 0
    skipped: int = 0
    converted: int = 0
    failed: int = 0
    failures: List[ConversionOutcome] = field(default_factory=list)
    aborted: bool = False

    @property
    def done(self) -> int:
        return self.skipped + self.converted + self.failed

    def add(self, outcome: ConversionOutcome) -> None:
        if outcome.status == FrameStatus.SKIPPED:
            self.skipped += 1
        elif outcome.status == FrameStatus.CONVERTED:
            self.converted += 1
        else:
            self.failed += 1
            self.failures.append(outcome)


def run_batches(
    records: Sequence[FrameRecord],
    process: Callable[[FrameRecord], ConversionOutcome],
    batch_size: int,
    on_progress: Optional[ProgressCallback] = None,
    label: str = "",
    workers: int = 1,
    stop_event: Optional[threading.Event] = None,
) -> BatchSummary:
    """
    Process records in contiguous batches, reporting progress once per batch.

    Args:
        records: Ordered frame records
        process: Per-frame work, e.g. FrameConverter.convert_if_needed
        batch_size: Number of records per batch
        on_progress: Called as on_progress(done, total, label) after each batch
        label: Free text passed through to on_progress
        workers: Threads used inside a batch (1 = sequential)
        stop_event: When set, the run stops after the in-flight batch

    Returns:
        BatchSummary with skipped/converted/failed counts
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    summary = BatchSummary(total=len(records))
    executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None

    try:
        for start in range(0, len(records), batch_size):
            if stop_event is not None and stop_event.is_set():
                logger.info(f"Stopping after {summary.done}/{summary.total} frames")
                summary.aborted = True
                break

            batch = records[start:start + batch_size]
            if executor is not None:
                outcomes = list(executor.map(process, batch))
            else:
                outcomes = [process(record) for record in batch]

            # Outcomes are only counted here, on the scheduling thread
            for outcome in outcomes:
                summary.add(outcome)

            if on_progress is not None:
                on_progress(summary.done, summary.total, label)
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    return summary


def format_progress_bar(done: int, total: int, label: str = "", width: int = BAR_WIDTH) -> str:
    ratio = done / total if total else 1.0
    filled = math.floor(ratio * width)
    percent = math.floor(ratio * 100)
    bar = "█" * filled + "░" * (width - filled)
    status = f" | {label}" if label else ""
    return f"[{bar}] {percent}% ({done}/{total}){status}"


class ProgressReporter:
    """
    Single-line progress display used as a run_batches callback.

    The line is redrawn in place on every call and left on screen once the
    context exits.
    """

    def __init__(self, console: Console | None = None, width: int = BAR_WIDTH):
        self.width = width
        self.live = Live(Text(""), console=console or Console(), auto_refresh=False, transient=False)

    def __enter__(self) -> "ProgressReporter":
        self.live.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.live.stop()

    def __call__(self, done: int, total: int, label: str = "") -> None:
        line = format_progress_bar(done, total, label, self.width)
        self.live.update(Text(line, no_wrap=True, overflow="ellipsis"), refresh=True)

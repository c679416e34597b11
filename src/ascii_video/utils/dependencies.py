"""Shared utilities for checking and invoking external tools."""

import logging
import re
import subprocess
from typing import List

logger = logging.getLogger(__name__)


class ExternalToolError(RuntimeError):
    """An external tool exited with an error or did not finish in time."""


def run_tool(cmd: List[str], timeout: float | None = None) -> bytes:
    """Run an external tool from an argument vector and return its stdout.

    Raises:
        ExternalToolError: If the tool is missing, exits non-zero or times out.
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=timeout, check=False)
    except FileNotFoundError:
        raise ExternalToolError(f"Required tool not found: {cmd[0]}")
    except subprocess.TimeoutExpired:
        raise ExternalToolError(f"{cmd[0]} did not finish within {timeout}s")

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="ignore").strip()
        raise ExternalToolError(f"{cmd[0]} failed with exit code {result.returncode}: {stderr}")
    return result.stdout


def _check_version(tool: str) -> str:
    try:
        result = subprocess.run(
            [tool, "-version"], capture_output=True, text=True, timeout=5, check=False,
        )
    except FileNotFoundError:
        raise ExternalToolError(f"Required tool not found: {tool}")

    # Release builds print 'ffmpeg version 6.1.1', git builds 'ffmpeg version N-11xxxx-g...'
    match = re.search(rf"{tool} version (\S+)", result.stdout)
    if not match:
        raise ExternalToolError(f"Could not parse {tool} version from output: {result.stdout.strip()[:200]}")
    return match.group(1)


def check_ffmpeg() -> str:
    """Verify ffmpeg and ffprobe are available.

    Returns:
        The detected ffmpeg version string.

    Raises:
        ExternalToolError: If either tool is not found.
    """
    version = _check_version("ffmpeg")
    _check_version("ffprobe")
    return version

"""Decode Netpbm grayscale rasters (P5 binary, P2 plain) into brightness matrices.

Samples are read straight from the raster payload instead of parsing a
per-pixel text dump, which is several times faster on full frames.
"""

import logging
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)

WHITESPACE = b" \t\r\n\v\f"
HEADER_TOKENS = 4  # magic, width, height, maxval


class DecodeError(ValueError):
    """Raised when a raster blob cannot be decoded at all."""


def parse_header(data: bytes) -> Tuple[bytes, int, int, int, int]:
    """Parse a PGM header.

    Returns:
        Tuple of (magic, width, height, maxval, payload_offset).

    Raises:
        DecodeError: If the header is missing, malformed or not grayscale.
    """
    tokens: list[bytes] = []
    i = 0
    n = len(data)
    while len(tokens) < HEADER_TOKENS:
        while i < n and data[i] in WHITESPACE:
            i += 1
        if i >= n:
            raise DecodeError(f"Truncated raster header ({len(tokens)} of {HEADER_TOKENS} fields)")
        if data[i] == ord("#"):
            while i < n and data[i] != ord("\n"):
                i += 1
            continue
        start = i
        while i < n and data[i] not in WHITESPACE:
            i += 1
        tokens.append(data[start:i])

    magic = tokens[0]
    if magic not in (b"P5", b"P2"):
        raise DecodeError(f"Unsupported raster format: {magic[:8]!r}")

    try:
        width, height, maxval = (int(t) for t in tokens[1:])
    except ValueError:
        raise DecodeError(f"Non-numeric raster header: {b' '.join(tokens)!r}")

    if width <= 0 or height <= 0:
        raise DecodeError(f"Invalid raster dimensions: {width}x{height}")
    if not 0 < maxval < 65536:
        raise DecodeError(f"Invalid raster max value: {maxval}")

    # A single whitespace byte separates the header from binary samples
    if i < n:
        i += 1
    return magic, width, height, maxval, i


def _read_samples(magic: bytes, payload: bytes, maxval: int) -> np.ndarray:
    if magic == b"P5":
        dtype = np.uint8 if maxval < 256 else np.dtype(">u2")
        usable = len(payload) - len(payload) % np.dtype(dtype).itemsize
        return np.frombuffer(payload[:usable], dtype=dtype)

    try:
        return np.array([int(token) for token in payload.split()], dtype=np.int64)
    except ValueError:
        raise DecodeError("Non-numeric sample in plain raster")


def decode_raster(data: bytes, width: int, height: int) -> np.ndarray:
    """
    Decode a grayscale raster into a (height, width) brightness matrix.

    Samples fill the matrix row-major. A short payload (truncated capture at
    the end of a stream) leaves the remaining entries at 0.0; extra samples
    are ignored.

    Args:
        data: Raw raster bytes, header included
        width: Expected number of columns
        height: Expected number of rows

    Returns:
        float64 array with values in [0.0, 1.0]
    """
    magic, raster_width, raster_height, maxval, offset = parse_header(data)
    if (raster_width, raster_height) != (width, height):
        logger.debug(f"Raster is {raster_width}x{raster_height}, expected {width}x{height}")

    samples = _read_samples(magic, data[offset:], maxval)
    expected = width * height
    if samples.size < expected:
        logger.debug(f"Raster has {samples.size} of {expected} samples, padding with black")

    flat = np.zeros(expected, dtype=np.float64)
    available = min(samples.size, expected)
    flat[:available] = samples[:available] / float(maxval)
    return np.clip(flat, 0.0, 1.0).reshape((height, width))

"""Tests for the PGM raster decoder."""

import numpy as np
import pytest

from ascii_video.ascii_frames.decoder import DecodeError, decode_raster


def test_binary_pgm():
    data = b"P5\n2 2\n255\n" + bytes([0, 255, 51, 102])
    matrix = decode_raster(data, 2, 2)
    assert matrix.shape == (2, 2)
    np.testing.assert_allclose(matrix, [[0.0, 1.0], [0.2, 0.4]])


def test_binary_pgm_sample_bytes_look_like_whitespace():
    # 10 and 32 are '\n' and ' ' but must be read as samples
    data = b"P5\n3 1\n255\n" + bytes([10, 32, 255])
    np.testing.assert_allclose(decode_raster(data, 3, 1), [[10 / 255, 32 / 255, 1.0]])


def test_plain_pgm_with_comment():
    data = b"P2\n# made by hand\n2 1\n255\n0 255\n"
    np.testing.assert_allclose(decode_raster(data, 2, 1), [[0.0, 1.0]])


def test_sixteen_bit_pgm():
    data = b"P5 1 1 65535\n" + (65535).to_bytes(2, "big")
    np.testing.assert_allclose(decode_raster(data, 1, 1), [[1.0]])


def test_truncated_payload_pads_with_black():
    data = b"P5\n2 2\n255\n" + bytes([255, 255, 255])
    matrix = decode_raster(data, 2, 2)
    np.testing.assert_allclose(matrix, [[1.0, 1.0], [1.0, 0.0]])


def test_header_only_decodes_to_black():
    matrix = decode_raster(b"P5\n4 2\n255\n", 4, 2)
    assert matrix.shape == (2, 4)
    assert not matrix.any()


def test_extra_samples_are_ignored():
    data = b"P5\n2 1\n255\n" + bytes([255, 0, 255, 255])
    np.testing.assert_allclose(decode_raster(data, 2, 1), [[1.0, 0.0]])


@pytest.mark.parametrize("data", [
    b"",
    b"P5\n2 2\n",
    b"P6\n2 2\n255\n" + bytes(12),
    b"P5\nx 2\n255\n",
    b"P5\n0 2\n255\n",
    b"P5\n2 2\n70000\n",
    b"P2\n2 1\n255\n0 abc\n",
    b"just some text",
])
def test_unparseable_raster_raises(data: bytes):
    with pytest.raises(DecodeError):
        decode_raster(data, 2, 2)

"""Plain-text PPM (P3) decoding and encoding.

The decoder is line oriented: after stripping carriage returns and dropping
blank and ``#`` comment lines, line 0 is the magic, line 1 the dimensions,
line 2 the maximum sample value, and each following line holds one image
row of ``3 * width`` interleaved R, G, B samples.

Samples are rescaled to 0-255 with ``round(255 * sample / max_value)``,
rounding halves up.
"""

from __future__ import annotations

from typing import List

import numpy as np
from loguru import logger

from ppm_diff.errors import FormatError
from ppm_diff.raster.pixel_buffer import PixelBuffer, Stride

MAGIC = "P3"
MAX_SAMPLE_CEILING = 65535


def _content_lines(text: str) -> List[str]:
    lines = []
    for line in text.replace("\r", "").split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines


def _to_int(token: str) -> int:
    """``int()`` restricted to optionally signed ASCII digits."""
    digits = token[1:] if token[:1] in ("+", "-") else token
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"not an integer: {token!r}")
    return int(token)


def _parse_dimensions(line: str) -> tuple[int, int]:
    tokens = line.split()
    if len(tokens) != 2:
        raise FormatError("bad dimensions")
    try:
        width, height = _to_int(tokens[0]), _to_int(tokens[1])
    except ValueError:
        raise FormatError("bad dimensions") from None
    if width <= 0 or height <= 0:
        raise FormatError("bad dimensions")
    return width, height


def _parse_max_value(line: str) -> int:
    try:
        max_value = _to_int(line)
    except ValueError:
        raise FormatError("bad maxValue") from None
    if not 0 < max_value <= MAX_SAMPLE_CEILING:
        raise FormatError("bad maxValue")
    return max_value


def _parse_samples(lines: List[str], width: int, height: int) -> np.ndarray:
    """Collect ``height`` rows of ``3 * width`` samples into an int64 array.

    Nothing is allocated from the declared dimensions until every row has
    been checked against them.
    """
    if len(lines) < height:
        raise FormatError("truncated data")

    n = 3 * width
    rows: List[List[str]] = []
    for y in range(height):
        tokens = lines[y].split()
        if len(tokens) < n:
            raise FormatError("truncated data")
        if len(tokens) > n:
            logger.debug(f"Row {y}: ignoring {len(tokens) - n} extra samples")
        rows.append(tokens[:n])

    try:
        return np.array([[_to_int(t) for t in row] for row in rows], dtype=np.int64)
    except (ValueError, OverflowError):
        raise FormatError("bad sample") from None


def rescale(samples: np.ndarray, max_value: int) -> np.ndarray:
    """Map samples in ``[0, max_value]`` to bytes in ``[0, 255]``.

    Out-of-range samples are clamped. Integer arithmetic keeps the
    round-half-up result exact: ``floor(255*s/m + 1/2) == (510*s + m) // (2*m)``.
    """
    out_of_range = np.count_nonzero((samples < 0) | (samples > max_value))
    if out_of_range:
        logger.warning(f"{out_of_range} samples outside [0, {max_value}] were clamped")
    clipped = np.clip(samples, 0, max_value).astype(np.int64)
    scaled = (510 * clipped + max_value) // (2 * max_value)
    return scaled.astype(np.uint8)


def decode(text: str, stride: Stride = Stride.RGB) -> PixelBuffer:
    """Parse P3 *text* into a :class:`PixelBuffer`.

    Args:
        text: Full contents of a P3 file.
        stride: Bytes per pixel of the returned buffer (3 or 4).

    Returns:
        A new, read-only pixel buffer.

    Raises:
        FormatError: ``bad magic``, ``bad dimensions``, ``bad maxValue``,
            ``bad sample`` or ``truncated data``.
    """
    lines = _content_lines(text)
    if not lines or lines[0] != MAGIC:
        raise FormatError("bad magic")
    if len(lines) < 2:
        raise FormatError("bad dimensions")
    width, height = _parse_dimensions(lines[1])
    if len(lines) < 3:
        raise FormatError("bad maxValue")
    max_value = _parse_max_value(lines[2])
    logger.debug(f"dim: {width} * {height}, max colour: {max_value}")

    samples = _parse_samples(lines[3:], width, height)
    if len(lines) > 3 + height:
        logger.debug(f"Ignoring {len(lines) - 3 - height} trailing lines")

    rgb = rescale(samples, max_value).reshape(height, width, 3)
    return PixelBuffer.from_rgb(rgb, stride)


def encode(buffer: PixelBuffer, max_value: int = 255) -> str:
    """Render *buffer* as P3 text, one image row per line. Alpha is dropped."""
    if not 0 < max_value <= MAX_SAMPLE_CEILING:
        raise ValueError(f"max_value must be in 1..{MAX_SAMPLE_CEILING}, got {max_value}")

    rgb = buffer.rgb.astype(np.int64)
    if max_value != 255:
        rgb = (2 * max_value * rgb + 255) // 510
    rows = [" ".join(map(str, row.ravel().tolist())) for row in rgb]
    header = [MAGIC, f"{buffer.width} {buffer.height}", str(max_value)]
    return "\n".join(header + rows) + "\n"

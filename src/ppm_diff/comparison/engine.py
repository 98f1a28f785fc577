"""Pixel and channel level comparison of two equally sized buffers.

For every pixel the absolute per-channel difference ``|a - b|`` is taken.
The mask raster paints differing pixels magenta and identical ones white;
the delta raster shows each channel difference multiplied by
``amplification`` and saturated at 255.

Rows can optionally be split into bands and processed on a thread pool;
numpy releases the GIL for the array arithmetic, and the per-band counters
are summed afterwards, so the result is identical to the sequential pass.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
from loguru import logger

from ppm_diff.comparison.summary import ResultSummary
from ppm_diff.errors import DimensionMismatchError
from ppm_diff.raster.pixel_buffer import OPAQUE, PixelBuffer, Stride

MAGENTA = (255, 0, 255)
WHITE = (255, 255, 255)
DEFAULT_AMPLIFICATION = 10


class DiffResult(NamedTuple):
    mask: PixelBuffer
    delta: PixelBuffer
    summary: ResultSummary


def _row_bands(height: int, n_bands: int) -> List[Tuple[int, int]]:
    """Split ``[0, height)`` into at most *n_bands* contiguous row ranges."""
    n_bands = max(1, min(n_bands, height))
    bounds = np.linspace(0, height, n_bands + 1).astype(int)
    return [(int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:]) if hi > lo]


def _diff_band(
    rgb_a: np.ndarray,
    rgb_b: np.ndarray,
    mask_out: np.ndarray,
    delta_out: np.ndarray,
    amplification: int,
) -> Tuple[int, int]:
    """Fill *mask_out* / *delta_out* for one band and return its counters."""
    delta = np.abs(rgb_a.astype(np.int32) - rgb_b.astype(np.int32))
    changed_channels = delta != 0
    changed = changed_channels.any(axis=-1)

    mask_out[..., :3] = WHITE
    mask_out[changed, :3] = MAGENTA
    np.minimum(delta * amplification, 255, out=delta)
    delta_out[..., :3] = delta

    return int(np.count_nonzero(changed)), int(np.count_nonzero(changed_channels))


def diff(
    a: PixelBuffer,
    b: PixelBuffer,
    *,
    amplification: int = DEFAULT_AMPLIFICATION,
    stride: Optional[Stride] = None,
    max_workers: int = 1,
) -> DiffResult:
    """Compare *a* and *b* and build the mask and delta rasters.

    Args:
        a: First image.
        b: Second image; must have the same width and height as *a*.
            The strides of the two inputs may differ.
        amplification: Factor applied to each channel difference in the
            delta raster before saturating at 255.
        stride: Layout of the output rasters. Defaults to ``a.stride``.
        max_workers: ``1`` for a single pass, ``>1`` to process row bands
            on a thread pool.

    Returns:
        ``DiffResult(mask, delta, summary)``.

    Raises:
        DimensionMismatchError: If the images differ in width or height.
    """
    if a.width != b.width or a.height != b.height:
        raise DimensionMismatchError((a.width, a.height), (b.width, b.height))
    if amplification < 1:
        raise ValueError(f"amplification must be >= 1, got {amplification}")
    # d * 255 >= 255 for every nonzero d, so larger factors change nothing
    factor = min(int(amplification), 255)

    width, height = a.width, a.height
    out_stride = Stride(stride if stride is not None else a.stride)

    mask = np.empty((height, width, out_stride), dtype=np.uint8)
    delta = np.empty((height, width, out_stride), dtype=np.uint8)
    if out_stride == Stride.RGBA:
        mask[..., 3] = OPAQUE
        delta[..., 3] = OPAQUE

    rgb_a, rgb_b = a.rgb, b.rgb
    bands = _row_bands(height, max_workers)

    def _run(band: Tuple[int, int]) -> Tuple[int, int]:
        lo, hi = band
        return _diff_band(rgb_a[lo:hi], rgb_b[lo:hi], mask[lo:hi], delta[lo:hi], factor)

    if len(bands) == 1:
        counts = [_run(bands[0])]
    else:
        logger.debug(f"Diffing {height} rows in {len(bands)} bands")
        with ThreadPoolExecutor(max_workers=len(bands)) as pool:
            counts = list(pool.map(_run, bands))

    different_pixels = sum(c[0] for c in counts)
    different_channels = sum(c[1] for c in counts)
    summary = ResultSummary.from_counts(different_pixels, different_channels, width * height)
    logger.debug(
        f"{different_pixels}/{width * height} pixels differ, "
        f"{different_channels}/{width * height * 3} channels differ"
    )

    return DiffResult(
        mask=PixelBuffer(width=width, height=height, pixels=mask),
        delta=PixelBuffer(width=width, height=height, pixels=delta),
        summary=summary,
    )

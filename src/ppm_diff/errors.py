"""Exception types raised by the decoder and the diff engine."""

from __future__ import annotations

from typing import Tuple


class PpmDiffError(Exception):
    """Base class for all ppm-diff failures."""


class FormatError(PpmDiffError, ValueError):
    """Raised by the decoder when PPM text is malformed."""


class DimensionMismatchError(PpmDiffError, ValueError):
    """Raised by the diff engine when the two images differ in size."""

    def __init__(self, shape_a: Tuple[int, int], shape_b: Tuple[int, int]):
        self.shape_a = shape_a
        self.shape_b = shape_b
        super().__init__(
            f"dimensions don't match: {shape_a[0]}x{shape_a[1]} vs {shape_b[0]}x{shape_b[1]}"
        )

"""Decode plain-text PPM (P3) images and diff them pixel by pixel."""

from ppm_diff.codec.ppm import decode, encode
from ppm_diff.comparison.engine import DiffResult, diff
from ppm_diff.comparison.summary import ResultSummary
from ppm_diff.errors import DimensionMismatchError, FormatError, PpmDiffError
from ppm_diff.raster.pixel_buffer import PixelBuffer, Stride

__all__ = [
    "DiffResult",
    "DimensionMismatchError",
    "FormatError",
    "PixelBuffer",
    "PpmDiffError",
    "ResultSummary",
    "Stride",
    "decode",
    "diff",
    "encode",
]

"""Immutable RGB / RGBA pixel buffer shared by the decoder and the diff engine.

Pixels are stored as a ``(height, width, stride)`` ``uint8`` array where
*stride* is fixed at construction: 3 for packed RGB, 4 for RGB plus an
opaque alpha byte. The array is flagged read-only so a buffer can be handed
to a renderer without being mutated behind its producer's back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

import numpy as np

OPAQUE = 255


class Stride(IntEnum):
    RGB = 3
    RGBA = 4


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Decoded image: dimensions plus row-major channel bytes.

    Args:
        width: Number of columns (> 0).
        height: Number of rows (> 0).
        pixels: ``(height, width, stride)`` uint8 array.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        # Private copy: no outside view may alias the frozen data.
        pixels = np.array(self.pixels, copy=True, order="C")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Dimensions must be positive, got {self.width}x{self.height}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Pixel data must be uint8, got {pixels.dtype}")
        if pixels.ndim != 3 or pixels.shape[:2] != (self.height, self.width):
            raise ValueError(
                f"Pixel array shape {pixels.shape} does not match {self.width}x{self.height}"
            )
        if pixels.shape[2] not in (Stride.RGB, Stride.RGBA):
            raise ValueError(f"Unsupported stride {pixels.shape[2]}")
        if pixels.shape[2] == Stride.RGBA and not np.all(pixels[..., 3] == OPAQUE):
            raise ValueError("RGBA pixel data must have opaque (255) alpha")
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_rgb(cls, rgb: np.ndarray, stride: Stride = Stride.RGB) -> PixelBuffer:
        """Build a buffer from an ``(H, W, 3)`` array, adding alpha for RGBA."""
        rgb = np.asarray(rgb, dtype=np.uint8)
        height, width = rgb.shape[:2]
        if Stride(stride) == Stride.RGBA:
            out = np.full((height, width, 4), OPAQUE, dtype=np.uint8)
            out[..., :3] = rgb
        else:
            out = np.array(rgb, dtype=np.uint8, copy=True)
        return cls(width=width, height=height, pixels=out)

    @classmethod
    def filled(
        cls,
        width: int,
        height: int,
        color: Tuple[int, int, int],
        stride: Stride = Stride.RGB,
    ) -> PixelBuffer:
        """Build a buffer where every pixel has the same *color*."""
        rgb = np.empty((height, width, 3), dtype=np.uint8)
        rgb[...] = color
        return cls.from_rgb(rgb, stride)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def stride(self) -> Stride:
        return Stride(self.pixels.shape[2])

    @property
    def rgb(self) -> np.ndarray:
        """Read-only ``(H, W, 3)`` view of the colour channels."""
        return self.pixels[..., :3]

    def __len__(self) -> int:
        return self.pixels.size

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        """Return the ``(r, g, b)`` triple at column *x*, row *y*."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        r, g, b = self.pixels[y, x, :3]
        return int(r), int(g), int(b)

    def tobytes(self) -> bytes:
        """Flat row-major bytes, ``width * height * stride`` long."""
        return self.pixels.tobytes()

    def with_stride(self, stride: Stride) -> PixelBuffer:
        """Return a copy of this buffer laid out with *stride* bytes per pixel."""
        if Stride(stride) == self.stride:
            return self
        return PixelBuffer.from_rgb(self.rgb, stride)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height}, stride={int(self.stride)})"

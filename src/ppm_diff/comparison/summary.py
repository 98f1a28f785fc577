"""Scalar outcome of one diff call."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ResultSummary:
    """Fraction of pixels and of channels that differ between two images."""

    pixel_diff_ratio: float
    channel_diff_ratio: float
    different_pixels: int = 0
    different_channels: int = 0
    total_pixels: int = 0

    @classmethod
    def from_counts(
        cls, different_pixels: int, different_channels: int, total_pixels: int,
    ) -> ResultSummary:
        if total_pixels <= 0:
            raise ValueError(f"total_pixels must be positive, got {total_pixels}")
        return cls(
            pixel_diff_ratio=different_pixels / total_pixels,
            channel_diff_ratio=different_channels / (total_pixels * 3),
            different_pixels=different_pixels,
            different_channels=different_channels,
            total_pixels=total_pixels,
        )

    @property
    def identical(self) -> bool:
        return self.different_pixels == 0 and self.pixel_diff_ratio == 0

    def as_percentages(self) -> Dict[str, float]:
        """Both ratios scaled to 0-100 (formatting is left to the caller)."""
        return {
            "pixel_diff_pct": self.pixel_diff_ratio * 100,
            "channel_diff_pct": self.channel_diff_ratio * 100,
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

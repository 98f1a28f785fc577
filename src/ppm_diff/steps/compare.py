"""Compare step: load two P3 files, diff them, write the output rasters."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from loguru import logger

from ppm_diff.codec.ppm import decode, encode
from ppm_diff.config import CompareConfig
from ppm_diff.comparison.engine import DiffResult, diff
from ppm_diff.comparison.summary import ResultSummary
from ppm_diff.errors import FormatError
from ppm_diff.raster.pixel_buffer import PixelBuffer, Stride

SLOTS = ("a", "b")


@dataclass
class ImagePair:
    """The two images currently loaded for comparison.

    Each slot is filled independently; a diff is only possible once both
    are present. Loading a slot replaces whatever it held before, and a
    failed decode leaves the slot untouched.
    """

    stride: Stride = Stride.RGB
    images: Dict[str, PixelBuffer] = field(default_factory=dict)

    def load(self, slot: str, text: str) -> PixelBuffer:
        """Decode *text* into *slot* (``"a"`` or ``"b"``)."""
        if slot not in SLOTS:
            raise KeyError(f"Unknown slot {slot!r}; expected one of {SLOTS}")
        buffer = decode(text, stride=self.stride)
        self.images[slot] = buffer
        logger.info(f"Loaded image {slot}: {buffer.width}x{buffer.height}")
        return buffer

    def load_file(self, slot: str, path: str) -> PixelBuffer:
        logger.info(f"Decoding {path}")
        return self.load(slot, read_ppm_text(path))

    def get(self, slot: str) -> Optional[PixelBuffer]:
        return self.images.get(slot)

    @property
    def ready(self) -> bool:
        return all(slot in self.images for slot in SLOTS)

    def clear(self) -> None:
        self.images.clear()

    def diff(self, **kwargs) -> DiffResult:
        """Diff slot ``a`` against slot ``b``.

        Keyword arguments are passed through to :func:`ppm_diff.comparison.engine.diff`.
        """
        if not self.ready:
            raise RuntimeError("2 images required to diff")
        return diff(self.images["a"], self.images["b"], **kwargs)

    def try_diff(self, **kwargs) -> Optional[DiffResult]:
        """Like :meth:`diff`, but log and return ``None`` if a slot is empty."""
        if not self.ready:
            logger.error("2 images required to diff")
            return None
        return self.diff(**kwargs)


@dataclass
class ComparisonReport:
    path_a: str
    path_b: str
    width: int
    height: int
    summary: ResultSummary
    mask_path: Optional[str] = None
    delta_path: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "path_a": self.path_a,
            "path_b": self.path_b,
            "width": self.width,
            "height": self.height,
            "mask_path": self.mask_path,
            "delta_path": self.delta_path,
            **self.summary.to_dict(),
        }


def read_ppm_text(path: str) -> str:
    """Read *path* as text.

    A file that is not valid UTF-8 cannot be P3 and raises :class:`FormatError`.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError:
        raise FormatError("bad magic") from None


def read_ppm_file(path: str, stride: Stride = Stride.RGB) -> PixelBuffer:
    return decode(read_ppm_text(path), stride=stride)


def write_ppm_file(path: str, buffer: PixelBuffer) -> str:
    """Write *buffer* to *path* as P3 text, creating parent directories."""
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(encode(buffer))
    logger.debug(f"Wrote {buffer!r} to {path}")
    return path


def run_info(path: str, cfg: CompareConfig) -> PixelBuffer:
    """Decode a single file and log its dimensions."""
    buffer = read_ppm_file(path, stride=Stride(cfg.decode.stride))
    logger.info(f"{path}: {buffer.width}x{buffer.height}, stride {int(buffer.stride)}")
    return buffer


def run_compare(
    path_a: str,
    path_b: str,
    cfg: CompareConfig,
    output_dir: Optional[str] = None,
) -> ComparisonReport:
    """Decode *path_a* and *path_b*, diff them, and write the rasters.

    Returns the :class:`ComparisonReport`. When neither *output_dir* nor
    ``cfg.output.dir`` is set, no files are written.
    """
    pair = ImagePair(stride=Stride(cfg.decode.stride))
    pair.load_file("a", path_a)
    pair.load_file("b", path_b)

    result = pair.diff(
        amplification=cfg.diff.amplification,
        max_workers=cfg.diff.max_workers,
    )
    summary = result.summary

    report = ComparisonReport(
        path_a=path_a,
        path_b=path_b,
        width=result.mask.width,
        height=result.mask.height,
        summary=summary,
    )

    output_dir = output_dir or cfg.output.dir
    if output_dir:
        report.mask_path = write_ppm_file(
            os.path.join(output_dir, cfg.output.mask_name), result.mask,
        )
        report.delta_path = write_ppm_file(
            os.path.join(output_dir, cfg.output.delta_name), result.delta,
        )
        logger.info(f"Diff rasters written to {output_dir}")

    pct = summary.as_percentages()
    logger.info(
        f"{pct['pixel_diff_pct']:.2f}% pixels differ, "
        f"{pct['channel_diff_pct']:.2f}% channels differ"
    )
    return report

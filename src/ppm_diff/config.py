"""YAML config loading with dataclass defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

from ppm_diff.comparison.engine import DEFAULT_AMPLIFICATION
from ppm_diff.raster.pixel_buffer import Stride

DEFAULT_CONFIG_PATH = "ppm_diff.yaml"


@dataclass
class DecodeConfig:
    stride: int = int(Stride.RGB)


@dataclass
class DiffConfig:
    amplification: int = DEFAULT_AMPLIFICATION
    max_workers: int = 1


@dataclass
class OutputConfig:
    dir: Optional[str] = None
    mask_name: str = "mask.ppm"
    delta_name: str = "delta.ppm"


@dataclass
class CompareConfig:
    decode: DecodeConfig = field(default_factory=DecodeConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(path: Optional[str] = None) -> CompareConfig:
    """Load config from YAML, falling back to defaults for missing keys."""
    if path is None:
        # Try default location
        default = Path(DEFAULT_CONFIG_PATH)
        if not default.exists():
            logger.warning("No config file found; using built-in defaults")
            return CompareConfig()
        path = str(default)

    logger.info(f"Using config: {path}")
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    cfg = CompareConfig()

    dec = raw.get("decode") or {}
    if dec.get("stride") is not None:
        stride = int(dec["stride"])
        if stride not in (Stride.RGB, Stride.RGBA):
            raise ValueError(f"decode.stride must be 3 or 4, got {stride}")
        cfg.decode.stride = stride

    df = raw.get("diff") or {}
    for key in ("amplification", "max_workers"):
        if df.get(key) is not None:
            value = int(df[key])
            if value < 1:
                raise ValueError(f"diff.{key} must be >= 1, got {value}")
            setattr(cfg.diff, key, value)

    out = raw.get("output") or {}
    for key in ("dir", "mask_name", "delta_name"):
        if out.get(key) is not None:
            setattr(cfg.output, key, str(out[key]))

    return cfg

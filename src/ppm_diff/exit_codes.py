"""Structured exit codes for ``ppm-diff`` commands."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ppm_diff.comparison.summary import ResultSummary


class ExitCode(IntEnum):
    SUCCESS = 0
    DIFFERENCES_FOUND = 1  # only with --fail-on-diff
    BAD_INPUT = 3
    DIMENSION_MISMATCH = 4


def exit_code_from_summary(summary: ResultSummary, fail_on_diff: bool = False) -> ExitCode:
    """Derive an exit code from a :class:`ResultSummary`."""
    if fail_on_diff and not summary.identical:
        return ExitCode.DIFFERENCES_FOUND
    return ExitCode.SUCCESS

"""Click CLI: ``ppm-diff`` command group."""

from __future__ import annotations

import json

import click
import yaml
from loguru import logger

from ppm_diff.config import load_config
from ppm_diff.errors import DimensionMismatchError, PpmDiffError
from ppm_diff.exit_codes import ExitCode, exit_code_from_summary
from ppm_diff.logging import setup_logging

STRIDE_CHOICE = click.Choice(["3", "4"])


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------

@click.group(invoke_without_command=True)
@click.version_option(package_name="ppm-diff", prog_name="ppm-diff")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True),
              help="Path to YAML config.")
@click.option("--log-level", default="INFO",
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
@click.option("--log-format", default="text",
              type=click.Choice(["text", "json"]),
              help="Log output format.")
@click.option("--run-id", default=None, help="Override auto-generated run ID.")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False),
              help="Also append log records to this file.")
@click.option("--show-config", is_flag=True, help="Print resolved config as YAML and exit.")
@click.pass_context
def ppm_diff(ctx: click.Context, config_path, log_level, log_format, run_id, log_file,
             show_config):
    """Decode two P3 images and report how they differ."""
    ctx.ensure_object(dict)

    ctx.obj["run_id"] = setup_logging(
        level=log_level, fmt=log_format, run_id=run_id, log_file=log_file,
    )

    try:
        ctx.obj["cfg"] = load_config(config_path)
    except (ValueError, TypeError, yaml.YAMLError) as exc:
        logger.error(f"Invalid config: {exc}")
        ctx.exit(ExitCode.BAD_INPUT)
        return

    if show_config:
        import dataclasses
        click.echo(yaml.dump(dataclasses.asdict(ctx.obj["cfg"]), default_flow_style=False))
        ctx.exit(ExitCode.SUCCESS)
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# info
# ---------------------------------------------------------------------------

@ppm_diff.command()
@click.argument("ppm_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--stride", type=STRIDE_CHOICE, default=None,
              help="Bytes per pixel of the decoded buffer.")
@click.pass_context
def info(ctx, ppm_file, stride):
    """Decode a P3 file and print its dimensions."""
    from ppm_diff.steps.compare import run_info

    cfg = ctx.obj["cfg"]
    if stride:
        cfg.decode.stride = int(stride)

    try:
        buffer = run_info(ppm_file, cfg)
    except PpmDiffError as exc:
        logger.error(f"{ppm_file}: {exc}")
        ctx.exit(ExitCode.BAD_INPUT)
        return
    except OSError as exc:
        logger.error(f"Could not read {ppm_file}: {exc}")
        ctx.exit(ExitCode.BAD_INPUT)
        return

    click.echo(f"{buffer.width} x {buffer.height}, stride {int(buffer.stride)}, "
               f"{len(buffer)} bytes")


# ---------------------------------------------------------------------------
# compare
# ---------------------------------------------------------------------------

@ppm_diff.command()
@click.argument("file_a", type=click.Path(exists=True, dir_okay=False))
@click.argument("file_b", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output-dir", default=None, type=click.Path(file_okay=False),
              help="Directory for mask.ppm and delta.ppm. Nothing is written if omitted.")
@click.option("--stride", type=STRIDE_CHOICE, default=None,
              help="Bytes per pixel of the decoded and output buffers.")
@click.option("--amplification", type=click.IntRange(min=1), default=None,
              help="Multiplier applied to channel deltas in delta.ppm.")
@click.option("--max-workers", type=click.IntRange(min=1), default=None,
              help="Threads used to diff row bands.")
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON.")
@click.option("--fail-on-diff", is_flag=True,
              help="Exit with code 1 (DIFFERENCES_FOUND) when the images differ.")
@click.pass_context
def compare(ctx, file_a, file_b, output_dir, stride, amplification, max_workers,
            as_json, fail_on_diff):
    """Diff FILE_A against FILE_B."""
    from ppm_diff.steps.compare import run_compare

    cfg = ctx.obj["cfg"]
    if stride:
        cfg.decode.stride = int(stride)
    if amplification is not None:
        cfg.diff.amplification = amplification
    if max_workers is not None:
        cfg.diff.max_workers = max_workers

    try:
        report = run_compare(file_a, file_b, cfg, output_dir=output_dir)
    except DimensionMismatchError as exc:
        logger.error(str(exc))
        ctx.exit(ExitCode.DIMENSION_MISMATCH)
        return
    except PpmDiffError as exc:
        logger.error(f"Could not decode input: {exc}")
        ctx.exit(ExitCode.BAD_INPUT)
        return
    except OSError as exc:
        logger.error(f"I/O error: {exc}")
        ctx.exit(ExitCode.BAD_INPUT)
        return

    summary = report.summary
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        pct = summary.as_percentages()
        click.echo(f"Size: {report.width}x{report.height}")
        click.echo(f"Pixel diff: {pct['pixel_diff_pct']:.2f}%")
        click.echo(f"Channel diff: {pct['channel_diff_pct']:.2f}%")
        if report.mask_path:
            click.echo(f"Mask: {report.mask_path}")
            click.echo(f"Delta: {report.delta_path}")

    ctx.exit(exit_code_from_summary(summary, fail_on_diff=fail_on_diff))

"""
Command line entry point: fetch every platform once and write the snapshot.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from crawler.pipelines.store import SnapshotStore
from trending import build_snapshot
from trending.config_loader import ConfigurationError
from trending.settings import TrendingSettings, load_settings
from trending.status import build_status

logger = logging.getLogger("trending")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: TrendingSettings, verbose: bool = False) -> None:
    handlers = [logging.StreamHandler(sys.stderr)]
    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    # urllib3 connection pool chatter is noise at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), help="Snapshot JSON path.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="Platform catalogue YAML.")
@click.option("--run-timeout", type=float, default=None, help="Overall run budget in seconds (0 = none).")
@click.option("--report", "report_path", type=click.Path(dir_okay=False, path_type=Path), help="Also write a run report.")
@click.option("--platform", "platforms", multiple=True, help="Only fetch these platform ids (repeatable).")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def main(
    output_path: Optional[Path],
    config_path: Optional[Path],
    run_timeout: Optional[float],
    report_path: Optional[Path],
    platforms: Tuple[str, ...],
    verbose: bool,
) -> None:
    load_dotenv()
    settings = load_settings()
    if output_path:
        settings.output_path = output_path
    if config_path:
        settings.config_path = config_path
    if run_timeout is not None:
        settings.run_timeout = max(0.0, run_timeout)
    configure_logging(settings, verbose)

    logger.info("Starting to fetch trending topics")
    try:
        result = build_snapshot(settings, only=list(platforms) or None)
    except (ConfigurationError, ValueError) as exc:
        raise click.ClickException(f"configuration error: {exc}") from exc

    try:
        written = SnapshotStore(settings.output_path).write(result.document.to_dict())
        if report_path:
            status = build_status(result.document, result.reports, result.instance)
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(json.dumps(status, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as exc:
        raise click.ClickException(f"cannot write output: {exc}") from exc

    click.echo(f"Data saved to {written}")
    click.echo(f"Using proxy instance: {result.instance}")
    for key, snapshot in result.document.platforms.items():
        click.echo(f"  {snapshot.icon} {snapshot.name} [{key}]: {len(snapshot.items)} items")


if __name__ == "__main__":  # pragma: no cover
    main()

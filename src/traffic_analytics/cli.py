import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.analytics import AnalyticsReport, AnalyticsService
from .core.errors import AnalyticsError
from .core.periods import CUSTOM_PERIOD, Period
from .core.store import RecordStore
from .utils.config import Config, ConfigurationError, Thresholds

console = Console()

PERIOD_CHOICES = [period.value for period in Period] + [CUSTOM_PERIOD]


def setup_logging(verbose: bool):
    """Configure logging with rich output"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(message)s", handlers=[RichHandler(rich_tracebacks=True)]
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", type=click.Path(exists=True), help="Configuration file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: Optional[str]):
    """Traffic Analytics - request log buckets, flow graphs and health scores"""
    setup_logging(verbose)
    try:
        ctx.obj = Config(config)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--period", "-p", type=click.Choice(PERIOD_CHOICES), help="Reporting period")
@click.option("--host", "-H", help="Only count requests to this hostname")
@click.option("--start", type=float, help="Custom window start (epoch seconds)")
@click.option("--end", type=float, help="Custom window end (epoch seconds)")
@click.option("--now", type=float, help="Report as of this time (epoch seconds)")
@click.option("--output", "-o", type=click.Path(), help="Output file")
@click.option("--format", "-fmt", type=click.Choice(["text", "json"]), default="text")
@click.pass_obj
def report(
    config: Config,
    files: List[str],
    period: Optional[str],
    host: Optional[str],
    start: Optional[float],
    end: Optional[float],
    now: Optional[float],
    output: Optional[str],
    format: str,
):
    """Build the analytics report for record FILES"""
    store = RecordStore()
    for file_path in files:
        for result in store.load(file_path):
            if result.errors:
                logging.warning(f"{result.path}: skipped {len(result.errors)} malformed records")

    try:
        service = AnalyticsService.from_config(config, store=store)
        analytics = service.report(
            period=period,
            host=host,
            start=start,
            end=end,
            now=datetime.fromtimestamp(now, timezone.utc) if now is not None else None,
        )
    except (AnalyticsError, ConfigurationError) as e:
        raise click.ClickException(str(e)) from e

    if format == "json":
        if output:
            with open(output, "w") as f:
                json.dump(analytics.to_dict(), f, indent=2)
        else:
            console.print_json(data=analytics.to_dict())
        return

    tables = render_report(analytics)
    for table in tables:
        console.print(table)

    if output:
        with open(output, "w") as f:
            file_console = Console(file=f)
            for table in tables:
                file_console.print(table)


def render_report(analytics: AnalyticsReport) -> List[Table]:
    """Rich tables for the three views of a report"""
    buckets = Table(title=f"Requests ({analytics.window.period.value})")
    buckets.add_column("Bucket")
    buckets.add_column("Requests", justify="right")
    buckets.add_column("Errors", justify="right")
    for bucket in analytics.buckets:
        buckets.add_row(bucket.label, str(bucket.request_count), str(bucket.error_count))

    labels = {node.index: node.label for node in analytics.graph.nodes}
    flows = Table(title="Traffic Flow")
    flows.add_column("Source")
    flows.add_column("Target")
    flows.add_column("Requests", justify="right")
    for edge in sorted(analytics.graph.edges, key=lambda e: e.weight, reverse=True):
        flows.add_row(labels[edge.source], labels[edge.target], str(edge.weight))

    health = Table(title="Health")
    health.add_column("Metric")
    health.add_column("Actual")
    health.add_column("Score", justify="right")
    health.add_column("Cap", justify="right")
    for metric in analytics.metrics:
        health.add_row(metric.subject, metric.actual, f"{metric.value:.2f}", f"{metric.cap:g}")

    return [buckets, flows, health]


@cli.command()
@click.pass_obj
def thresholds(config: Config):
    """Show the health metric thresholds in effect"""
    try:
        values = Thresholds.from_config(config).as_dict()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    table = Table(title="Health Metric Thresholds")
    table.add_column("Metric")
    table.add_column("Threshold", justify="right")
    for name, value in values.items():
        table.add_row(name, f"{value:g}")
    console.print(table)


if __name__ == "__main__":
    cli()

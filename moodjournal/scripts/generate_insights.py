"""CLI command for the monthly insight batch.

Usage:
    flask generate-insights                    # previous journal month
    flask generate-insights --month 2024-01
    flask generate-insights --batch-size 3 --pause 0
"""

from __future__ import annotations

import click
from flask.cli import with_appcontext


@click.command("generate-insights")
@click.option("--month", "-m", help="Month to summarize (YYYY-MM); defaults to the previous month")
@click.option("--batch-size", type=click.IntRange(min=1), default=None, help="Users processed concurrently")
@click.option("--pause", type=click.FloatRange(min=0), default=None, help="Seconds to sleep between batches")
@with_appcontext
def generate_insights_command(month: str | None, batch_size: int | None, pause: float | None):
    """Generate monthly AI insights for every active user."""
    from moodjournal.core.errors import InvalidInput
    from moodjournal.domains.insights.tasks import generate_monthly_insights

    try:
        report = generate_monthly_insights(month, batch_size=batch_size, pause_seconds=pause)
    except InvalidInput as exc:
        raise click.BadParameter(exc.message, param_hint="--month") from exc

    click.echo(
        f"Insights for {report.month}: {report.processed} users | "
        f"Generated: {report.generated}, Skipped: {report.skipped}, Failed: {report.failed}"
    )
    for error in report.errors:
        click.echo(f"  ✗ {error}", err=True)


def register_commands(app):
    """Register CLI commands with the app."""
    app.cli.add_command(generate_insights_command)

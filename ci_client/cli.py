"""
Command-line interface for browsing normalized CI builds.

Provides commands to page through builds served by the CI server and to
normalize raw ingestion records stored in a local JSON file.
"""

import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import click

from ci_builds.builder import BuildAggregateBuilder
from ci_builds.config import BuildsConfig, load_config
from ci_builds.enrichment import EnrichmentClient
from ci_builds.orchestrator import BuildFetchOrchestrator
from ci_common.errors import RecordError, TransportError
from ci_common.models import Build, BuildFilter

from .client import HTTPBuildSource
from .transport import HTTPTransport

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def run_async(coro):
    """Helper to run async functions in CLI commands."""
    return asyncio.run(coro)


def configure_logging(level: str) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def format_duration(seconds: float | None) -> str:
    """Format a build duration as e.g. "1h 02m 03s"."""
    if seconds is None:
        return "-"
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def format_ref(build: Build) -> str:
    """Human-readable ref of a build: PR number, tag or branch."""
    if build.pr:
        return f"PR #{build.pr}"
    if build.tag:
        return f"tag {build.tag}"
    return build.branch or "-"


def first_line(text: str | None, width: int = 40) -> str:
    """First line of a commit message, truncated to `width` characters."""
    if not text:
        return "-"
    lines = text.splitlines()
    line = lines[0] if lines else ""
    return line if len(line) <= width else line[: width - 1] + "…"


def print_builds(builds: list[Build], json_output: bool) -> None:
    """Print builds as JSON or as a table."""
    if json_output:
        click.echo(json.dumps([b.to_dict() for b in builds], indent=2))
        return

    if not builds:
        click.echo("No builds found.")
        return

    click.echo(
        f"{'ID':<8} {'STATUS':<8} {'REPOSITORY':<30} {'REF':<20} "
        f"{'SHA':<8} {'DURATION':<12} {'MESSAGE'}"
    )
    click.echo("-" * 130)
    for b in builds:
        sha = (b.commit_sha or "-")[:7]
        click.echo(
            f"{b.id:<8} {b.status.value:<8} {b.repository_name[:30]:<30} "
            f"{format_ref(b)[:20]:<20} {sha:<8} "
            f"{format_duration(b.build_duration_seconds):<12} "
            f"{first_line(b.commit_message)}"
        )


def create_builder(config: BuildsConfig, transport: HTTPTransport | None) -> BuildAggregateBuilder:
    """Builder wired with an enrichment client, unless lookups are disabled."""
    if transport is None:
        return BuildAggregateBuilder()
    return BuildAggregateBuilder(EnrichmentClient(transport, config.github_api_url))


@click.group()
def cli():
    """CI Builds - Browse normalized builds from GitHub and Bitbucket webhooks."""
    pass


@cli.command("list")
@click.option(
    "--filter",
    "build_filter",
    type=click.Choice([f.value for f in BuildFilter]),
    default=None,
    help="Which builds to list (default: CI_BUILD_FILTER env or all)",
)
@click.option("--user-id", type=int, default=None, help="User whose builds are listed")
@click.option(
    "--page-size",
    type=click.IntRange(min=1),
    default=None,
    help="Builds per page (default: CI_PAGE_SIZE env or 5)",
)
@click.option(
    "--pages", type=click.IntRange(min=1), default=1, help="Number of pages to fetch"
)
@click.option("--no-enrich", is_flag=True, help="Skip profile lookups")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="WARNING",
    help="Logging level (default: WARNING)",
)
def list_builds(
    build_filter: str | None,
    user_id: int | None,
    page_size: int | None,
    pages: int,
    no_enrich: bool,
    json_output: bool,
    log_level: str,
):
    """Fetch pages of builds from the CI server."""
    configure_logging(log_level)
    config = load_config()

    async def fetch() -> int:
        transport = HTTPTransport(timeout=config.http_timeout)
        source = HTTPBuildSource(config.server_url, transport)
        orchestrator = BuildFetchOrchestrator(
            source,
            create_builder(config, None if no_enrich else transport),
            page_size=page_size or config.page_size,
            build_filter=BuildFilter(build_filter) if build_filter else config.build_filter,
            subject_user_id=user_id if user_id is not None else config.user_id,
        )

        try:
            for _ in range(pages):
                await orchestrator.fetch_next_page()
                for failure in orchestrator.failures:
                    click.echo(
                        f"Warning: build {failure.record_id} skipped: {failure.error}",
                        err=True,
                    )
                if not orchestrator.has_more:
                    break
        except TransportError as e:
            click.echo(f"Error: fetch failed: {e}", err=True)
            if orchestrator.items:
                print_builds(orchestrator.items, json_output)
            return 1
        finally:
            transport.close()

        print_builds(orchestrator.items, json_output)
        return 0

    sys.exit(run_async(fetch()))


@cli.command("normalize")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--now",
    type=float,
    default=None,
    help="Reference time in epoch seconds for running builds (default: current time)",
)
@click.option("--no-enrich", is_flag=True, help="Skip profile lookups")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="WARNING",
    help="Logging level (default: WARNING)",
)
def normalize(
    path: Path, now: float | None, no_enrich: bool, json_output: bool, log_level: str
):
    """
    Normalize raw build records stored in a JSON file.

    PATH holds a single record, a list of records, or {"data": [...]}.
    """
    configure_logging(log_level)
    config = load_config()

    try:
        document = json.loads(path.read_text())
    except (OSError, ValueError) as e:
        click.echo(f"Error: cannot read {path}: {e}", err=True)
        sys.exit(1)

    if isinstance(document, dict) and isinstance(document.get("data"), list):
        records = document["data"]
    elif isinstance(document, list):
        records = document
    else:
        records = [document]

    current_time = now if now is not None else time.time()

    async def run() -> int:
        transport = None if no_enrich else HTTPTransport(timeout=config.http_timeout)
        builder = create_builder(config, transport)
        builds = []
        exit_code = 0
        try:
            for record in records:
                try:
                    builds.append(await builder.build(record, current_time))
                except RecordError as e:
                    click.echo(f"Error: build {e.record_id} skipped: {e}", err=True)
                    exit_code = 1
        finally:
            if transport is not None:
                transport.close()

        builds.sort(key=lambda b: b.id, reverse=True)
        print_builds(builds, json_output)
        return exit_code

    sys.exit(run_async(run()))


def main():
    """Main entry point for the ci-builds CLI."""
    cli()


if __name__ == "__main__":
    main()

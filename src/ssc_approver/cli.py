"""ssc-approver: list Fortify SSC artifacts that are waiting for approval."""

from __future__ import annotations

import logging
import sys

import click

from .aggregator import filter_by_project, find_artifacts_requiring_approval
from .client import SSCClient
from .config import SSCConfig, load_config
from .errors import SSCError
from .formatters import (
    format_approval_csv,
    format_approval_json,
    format_approval_table,
    format_artifact_detail,
    format_projects_table,
    format_version_artifacts_table,
    format_versions_table,
)
from .repository import SSCRepository

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ["table", "json", "csv"]


def _get_config(ctx: click.Context) -> SSCConfig:
    obj = ctx.find_root().obj
    if "config" not in obj:
        obj["config"] = load_config(
            obj.get("url"),
            obj.get("token"),
            timeout=obj.get("timeout"),
            insecure=obj.get("insecure"),
        )
    return obj["config"]


def _get_repository(ctx: click.Context) -> SSCRepository:
    """Build the repository once per invocation; config errors surface here."""
    obj = ctx.find_root().obj
    if "repository" not in obj:
        client = SSCClient(_get_config(ctx))
        ctx.find_root().call_on_close(client.close)
        obj["repository"] = SSCRepository(client)
    return obj["repository"]


def _exit_code_for_error(err: SSCError) -> int:
    """Map failures to deterministic process exit codes."""
    if err.code == "CONFIG":
        return 2
    if err.code in {"DECODE", "INVALID_RESPONSE"}:
        return 17
    if err.code in {"TIMEOUT", "NETWORK"}:
        return 13
    if err.status_code in {401, 403}:
        return 10
    if err.status_code == 404:
        return 12
    if err.status_code >= 500:
        return 15
    return 1


def _exit_with_error(err: SSCError, action: str) -> None:
    if err.code == "CONFIG":
        click.secho(f"Error loading configuration: {err.message}", fg="red", err=True)
    else:
        click.secho(f"Error {action}: {err.message}", fg="red", err=True)
    sys.exit(_exit_code_for_error(err))


@click.group()
@click.option("--url", "-u", default=None, help="SSC URL, e.g. https://sast.example.com (or set FORTIFY_SSC_URL)")
@click.option("--token", "-t", default=None, help="SSC API token (or set FORTIFY_SSC_TOKEN)")
@click.option("--timeout", default=None, type=float, help="HTTP request timeout in seconds (default 60).")
@click.option("--insecure/--verify-tls", default=None, help="Skip TLS certificate verification.")
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
@click.pass_context
def main(ctx, url: str | None, token: str | None, timeout: float | None, insecure: bool | None, verbose: bool):
    """List and inspect Fortify SSC artifacts that require approval."""
    ctx.ensure_object(dict)
    ctx.obj.update({"url": url, "token": token, "timeout": timeout, "insecure": insecure})
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s", force=True)
        logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

@main.command(name="list")
@click.option("--project", "-p", "project_filter", default=None, help="Filter by project name (partial match)")
@click.option("--details", "-d", is_flag=True, help="Show detailed processing messages")
@click.option("--output", "-o", "output_format", default="table", type=click.Choice(OUTPUT_FORMATS))
@click.option("--max-concurrency", default=1, type=click.IntRange(1, 64), help="Parallel artifact fetches.")
@click.pass_context
def list_artifacts(ctx, project_filter, details, output_format, max_concurrency):
    """List artifacts requiring approval across all projects."""
    try:
        repository = _get_repository(ctx)
        artifacts = find_artifacts_requiring_approval(repository, max_workers=max_concurrency)
    except SSCError as e:
        _exit_with_error(e, "fetching artifacts")

    artifacts = filter_by_project(artifacts, project_filter)
    if not artifacts:
        click.secho("No artifacts requiring approval found.", fg="green")
        return

    if output_format == "json":
        click.echo(format_approval_json(artifacts, details))
    elif output_format == "csv":
        click.echo(format_approval_csv(artifacts))
    else:
        click.secho(f"\nFound {len(artifacts)} artifacts requiring approval:\n", fg="yellow")
        click.echo(format_approval_table(artifacts, details))
        if not details:
            click.secho("\nTip: Use -d or --details flag to see processing messages for each artifact", fg="cyan")


# ---------------------------------------------------------------------------
# projects / versions
# ---------------------------------------------------------------------------

@main.command()
@click.pass_context
def projects(ctx):
    """List all projects."""
    try:
        repository = _get_repository(ctx)
        logger.info("Fetching projects...")
        rows = repository.get_projects()
    except SSCError as e:
        _exit_with_error(e, "fetching projects")

    if not rows:
        click.secho("No projects found.", fg="yellow")
        return
    click.secho(f"\nFound {len(rows)} projects:\n", fg="green")
    click.echo(format_projects_table(rows))


@main.command()
@click.argument("project_id", type=int)
@click.pass_context
def versions(ctx, project_id):
    """List the versions of one project."""
    try:
        rows = _get_repository(ctx).get_project_versions(project_id)
    except SSCError as e:
        _exit_with_error(e, "fetching project versions")

    if not rows:
        click.secho("No versions found for this project.", fg="yellow")
        return
    click.secho(f"\nFound {len(rows)} versions:\n", fg="green")
    click.echo(format_versions_table(rows))


# ---------------------------------------------------------------------------
# artifacts / artifact
# ---------------------------------------------------------------------------

@main.command()
@click.argument("version_id", type=int)
@click.pass_context
def artifacts(ctx, version_id):
    """List artifacts for a specific project version."""
    try:
        repository = _get_repository(ctx)
        logger.info("Fetching artifacts for project version %d...", version_id)
        rows = repository.get_artifacts(version_id)
    except SSCError as e:
        _exit_with_error(e, "fetching artifacts")

    if not rows:
        click.secho("No artifacts found for this project version.", fg="yellow")
        return
    click.secho(f"\nFound {len(rows)} artifacts:\n", fg="green")
    click.echo(format_version_artifacts_table(rows))


@main.command()
@click.argument("artifact_id", type=int)
@click.pass_context
def artifact(ctx, artifact_id):
    """Show one artifact with its processing messages."""
    try:
        detail = _get_repository(ctx).get_artifact_details(artifact_id)
    except SSCError as e:
        _exit_with_error(e, "fetching artifact")

    click.echo(format_artifact_detail(detail))


if __name__ == "__main__":
    main()

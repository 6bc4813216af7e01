"""Main CLI entry point using Typer."""

import logging
import sys
from typing import Dict, List, Optional

import typer
from rich.console import Console

from ..discovery.scanner import DiscoveryError, ResourceDiscovery
from ..models.resource import Resource, TagFilter, TagMatchMode
from ..restore.cleaner import ResourceCleaner
from ..restore.deleter import ResourceDeleter
from ..restore.inference import NamingContext
from ..restore.reporter import DeletionReporter
from ..utils.logging import setup_logging
from .config import Config

logger = logging.getLogger(__name__)

# Create Typer app
app = typer.Typer(
    name="tagsweep",
    help="AWS Tag Sweeper - find AWS resources by tag and delete them in dependency order",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None

# --tag takes two values and may repeat, which Typer options cannot express;
# tag pairs are collected from the extra arguments instead.
TAG_COMMAND_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}

APP_TAG_KEY = "sst:app"
STAGE_TAG_KEY = "sst:stage"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """AWS Tag Sweeper - find AWS resources by tag and delete them in dependency order."""
    global config

    try:
        config = Config.load()
    except ValueError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)

    # Setup logging
    log_level = "ERROR" if quiet else ("DEBUG" if verbose else config.log_level)
    setup_logging(level=log_level, verbose=verbose)

    # Disable colors if requested
    if no_color:
        console.no_color = True


@app.command()
def version():
    """Show version information."""
    import boto3

    from .. import __version__

    console.print(f"aws-tag-sweeper version {__version__}")
    console.print(f"Python {sys.version.split()[0]}")
    console.print(f"boto3 {boto3.__version__}")


def parse_tag_args(args: List[str]) -> List[TagFilter]:
    """Parse repeated "--tag KEY VALUE" triples from raw arguments.

    Raises:
        ValueError: On a dangling --tag or any other unexpected argument
    """
    filters = []
    index = 0
    while index < len(args):
        if args[index] != "--tag":
            raise ValueError(f"Unexpected argument: {args[index]}")
        if index + 2 >= len(args):
            raise ValueError("--tag requires both KEY and VALUE")
        filters.append(TagFilter(key=args[index + 1], value=args[index + 2]))
        index += 3
    return filters


def _get_config() -> Config:
    global config
    if config is None:
        config = Config.load()
    return config


def _require_tags(ctx: typer.Context, command: str) -> List[TagFilter]:
    """Parse tag filters or exit with code 1 before any discovery happens."""
    try:
        filters = parse_tag_args(list(ctx.args))
    except ValueError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)

    if not filters:
        console.print(f"✗ Error: --tag KEY VALUE is required for {command} command", style="bold red")
        console.print(f"Example: tagsweep {command} --tag sst:stage dev --tag sst:app insights")
        raise typer.Exit(code=1)

    return filters


def _naming_context(filters: List[TagFilter]) -> NamingContext:
    """App/stage for name inference: config first, then sst:app / sst:stage tag filters."""
    cfg = _get_config()
    by_key: Dict[str, str] = {tag_filter.key: tag_filter.value for tag_filter in filters}
    return NamingContext(
        app=cfg.app or by_key.get(APP_TAG_KEY),
        stage=cfg.stage or by_key.get(STAGE_TAG_KEY),
    )


def _filters_dict(filters: List[TagFilter], tag_match: TagMatchMode) -> dict:
    return {
        "tags": [{"key": tag_filter.key, "value": tag_filter.value} for tag_filter in filters],
        "tag_match": tag_match.value,
    }


def _discover(
    filters: List[TagFilter],
    tag_match: TagMatchMode,
    region: str,
    profile: Optional[str],
) -> List[Resource]:
    cfg = _get_config()
    tag_str = f" {tag_match.value} ".join(str(tag_filter) for tag_filter in filters)
    console.print(f"🔍 Searching {region} for resources tagged {tag_str}...")

    try:
        discovery = ResourceDiscovery.for_region(region=region, profile=profile, max_workers=cfg.max_workers)
        return discovery.find(filters, tag_match)
    except DiscoveryError as e:
        console.print(f"✗ {e}", style="bold red")
        logger.debug("Discovery failed", exc_info=True)
        raise typer.Exit(code=1)


@app.command("find", context_settings=TAG_COMMAND_SETTINGS)
def find_command(
    ctx: typer.Context,
    tag_match: TagMatchMode = typer.Option(
        TagMatchMode.AND, "--tagMatch", "--tag-match", case_sensitive=False, help="Tag matching logic (AND or OR)"
    ),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region (default: config or us-east-1)"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
):
    """Find AWS resources by tags.

    Requires at least one --tag KEY VALUE pair; repeat --tag for more.

    Examples:
        tagsweep find --tag sst:stage dev --tag sst:app insights
        tagsweep find --tag team data --tag team analytics --tagMatch OR
    """
    filters = _require_tags(ctx, "find")

    try:
        cfg = _get_config()
        region = region or cfg.region
        profile = profile or cfg.aws_profile

        resources = _discover(filters, tag_match, region, profile)
        DeletionReporter(console).display_resources(resources)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error finding resources: {e}", style="bold red")
        logger.exception("Error in find command")
        raise typer.Exit(code=1)


@app.command("delete", context_settings=TAG_COMMAND_SETTINGS)
def delete_command(
    ctx: typer.Context,
    tag_match: TagMatchMode = typer.Option(
        TagMatchMode.AND, "--tagMatch", "--tag-match", case_sensitive=False, help="Tag matching logic (AND or OR)"
    ),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="AWS region (default: config or us-east-1)"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="AWS profile name"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview changes without deleting"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompts"),
):
    """Delete AWS resources by tags, in dependency order.

    Requires at least one --tag KEY VALUE pair; repeat --tag for more.
    Every planned resource is attempted once; failures are reported at the end.

    Examples:
        tagsweep delete --tag sst:stage dev --tag sst:app insights --dry-run
        tagsweep delete --tag sst:stage pr-42 --force
    """
    filters = _require_tags(ctx, "delete")

    try:
        cfg = _get_config()
        region = region or cfg.region
        profile = profile or cfg.aws_profile

        resources = _discover(filters, tag_match, region, profile)
        reporter = DeletionReporter(console)

        cleaner = ResourceCleaner(
            remover=ResourceDeleter(aws_profile=profile, max_retries=cfg.max_retries),
            naming=_naming_context(filters),
        )
        plan = cleaner.plan(resources)

        if not plan:
            console.print("[yellow]No resources found matching the given tags - nothing to delete[/yellow]")
            return

        reporter.display_plan(plan, dry_run=dry_run)

        # Confirm deletion
        if not dry_run and not force:
            confirm = typer.confirm(
                f"⚠️  You are about to delete {len(plan)} resource(s). This action cannot be undone.\n"
                "   Are you sure you want to continue?",
                default=False,
            )
            if not confirm:
                console.print("Cancelled")
                raise typer.Exit(code=0)

        operation = cleaner.execute(
            plan,
            confirmed=True,
            dry_run=dry_run,
            region=region,
            aws_profile=profile,
            filters=_filters_dict(filters, tag_match),
            on_record=lambda record: reporter.display_record(record, len(plan)),
        )
        reporter.display_summary(operation)

        if operation.exit_code != 0:
            raise typer.Exit(code=operation.exit_code)

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"✗ Error deleting resources: {e}", style="bold red")
        logger.exception("Error in delete command")
        raise typer.Exit(code=1)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()

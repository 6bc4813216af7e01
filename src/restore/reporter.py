"""Discovery and deletion report display."""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.deletion_operation import DeletionOperation
from ..models.deletion_record import DeletionRecord, DeletionStatus
from ..models.resource import Resource
from .priority import resource_priority


class DeletionReporter:
    """Format and display discovered resources, deletion plans and run summaries."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize deletion reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def display_resources(self, resources: Sequence[Resource]) -> None:
        """Display discovered resources grouped by service."""
        if not resources:
            self.console.print("[yellow]No resources found matching the given tags[/yellow]")
            return

        table = Table(title=f"Found {len(resources)} resource(s)", show_header=True, header_style="bold magenta")
        table.add_column("Service", style="cyan")
        table.add_column("Type", style="cyan")
        table.add_column("Resource ID", style="white")
        table.add_column("Region", style="dim")

        for resource in sorted(resources, key=lambda r: (r.service, r.resource_type, r.resource_id)):
            table.add_row(resource.service, resource.resource_type, resource.resource_id, resource.region or "-")

        self.console.print()
        self.console.print(table)

        counts = Counter(resource.service for resource in resources)
        summary = ", ".join(f"{service}: {count}" for service, count in sorted(counts.items()))
        self.console.print(f"\nBy service: {summary}\n")

    def display_plan(self, plan: Sequence[Resource], dry_run: bool = False) -> None:
        """Display the ordered deletion plan."""
        title = "Deletion plan (dry run)" if dry_run else "Deletion plan"
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", style="dim", width=4)
        table.add_column("Service", style="cyan")
        table.add_column("Type", style="cyan")
        table.add_column("Resource ID", style="white")
        table.add_column("Priority", justify="right", style="yellow")

        for position, resource in enumerate(plan, start=1):
            table.add_row(
                str(position),
                resource.service,
                resource.resource_type,
                resource.resource_id,
                f"{resource_priority(resource):g}",
            )

        self.console.print()
        self.console.print(table)
        self.console.print()

    def display_record(self, record: DeletionRecord, total: int) -> None:
        """Display a progress line for one processed resource."""
        prefix = f"[{record.position + 1}/{total}]"
        resource = record.resource

        if record.status == DeletionStatus.DRY_RUN:
            self.console.print(f"{prefix} [cyan]Would delete[/cyan] {resource.kind} {resource.resource_id}")
        elif record.status == DeletionStatus.SUCCEEDED:
            self.console.print(f"{prefix} [green]✓ Deleted[/green] {resource.kind} {resource.resource_id}")
        else:
            self.console.print(
                f"{prefix} [red]✗ Failed[/red] {resource.kind} {resource.resource_id}: {record.error_message}"
            )

    def display_summary(self, operation: DeletionOperation) -> None:
        """Display the final run summary, including every failure."""
        if operation.is_dry_run:
            self.console.print(
                Panel(
                    f"[bold]Dry run complete[/bold]\n"
                    f"{operation.total_resources} resource(s) would be deleted. No changes were made.",
                    style="cyan",
                )
            )
            return

        style = "green" if operation.failed_count == 0 else ("yellow" if operation.succeeded_count else "red")
        self.console.print(
            Panel(
                f"[bold]Deletion {operation.status.value}[/bold]\n"
                f"Succeeded: {operation.succeeded_count}  Failed: {operation.failed_count}  "
                f"Total: {operation.total_resources}",
                style=style,
            )
        )

        failed = operation.failed_records
        if failed:
            table = Table(title="Failed resources", show_header=True, header_style="bold red")
            table.add_column("ARN", style="white")
            table.add_column("Error", style="red")
            for record in failed:
                table.add_row(record.resource_arn, record.error_message or "")
            self.console.print(table)

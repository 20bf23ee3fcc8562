"""Revert and snapshot report formatting and display."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.remediation_record import RemediationRecord, RemediationStatus
from ..models.revert_operation import RevertOperation
from ..models.snapshot import Baseline

STATUS_STYLES = {
    RemediationStatus.SUCCEEDED: "[green]✓ done[/green]",
    RemediationStatus.PLANNED: "[cyan]→ would[/cyan]",
    RemediationStatus.SKIPPED: "[yellow]⊘ skip[/yellow]",
    RemediationStatus.FAILED: "[red]✗ fail[/red]",
}


class RevertReporter:
    """Format and display revert operations and baselines."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize reporter.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def display(self, operation: RevertOperation) -> None:
        """Display a revert operation summary.

        Args:
            operation: RevertOperation to display
        """
        title = "Revert Plan (dry run)" if operation.is_dry_run else "Revert Report"
        self.console.print()
        self.console.print(
            Panel(
                f"[bold]{title}[/bold]\n"
                f"Baseline: {operation.baseline_dir}\n"
                f"Status: {operation.status.value}",
                style="cyan",
            )
        )

        if not operation.records:
            self.console.print("[green]✓ Cluster matches baseline; nothing to do[/green]", style="bold")
            return

        self._display_summary(operation)

        table = Table(show_header=True, box=None, padding=(0, 2))
        table.add_column("Step", style="cyan")
        table.add_column("Outcome", width=10)
        table.add_column("Kind")
        table.add_column("Name", style="white")
        table.add_column("Detail", style="dim")

        for step in operation.steps:
            for record in step.records:
                table.add_row(
                    step.name,
                    STATUS_STYLES[record.status],
                    record.kind,
                    record.identifier,
                    self._detail(record),
                )

        self.console.print(table)
        self.console.print()

    def _display_summary(self, operation: RevertOperation) -> None:
        """Display summary statistics."""
        table = Table(title="Summary", show_header=True, header_style="bold magenta")
        table.add_column("Outcome", style="cyan", width=15)
        table.add_column("Count", justify="right", style="yellow", width=10)

        if operation.planned_count > 0:
            table.add_row("→ Planned", f"[cyan]{operation.planned_count}[/cyan]")
        if operation.succeeded_count > 0:
            table.add_row("✓ Succeeded", f"[green]{operation.succeeded_count}[/green]")
        if operation.skipped_count > 0:
            table.add_row("⊘ Skipped", f"[yellow]{operation.skipped_count}[/yellow]")
        if operation.failed_count > 0:
            table.add_row("✗ Failed", f"[red]{operation.failed_count}[/red]")

        table.add_row("━" * 15, "━" * 10, style="dim")
        table.add_row("[bold]Total", f"[bold]{operation.total_items}")

        self.console.print(table)
        self.console.print()

    def display_baseline(self, baseline: Baseline, location: str) -> None:
        """Display what a snapshot captured."""
        table = Table(show_header=True, title="Baseline")
        table.add_column("Resource", style="cyan")
        table.add_column("Count", justify="right", style="green")

        for kind, snapshot in sorted(baseline.snapshots.items()):
            label = f"{kind} ({snapshot.namespace})" if snapshot.namespace else kind
            table.add_row(label, str(snapshot.count))
        table.add_row("oauth", "placeholder" if baseline.oauth.is_placeholder else "captured")

        self.console.print(table)
        self.console.print(f"\nFiles: {location}")

    def _detail(self, record: RemediationRecord) -> str:
        if record.status == RemediationStatus.FAILED:
            return record.error_message or ""
        if record.status == RemediationStatus.SKIPPED:
            return record.skip_reason or ""
        return record.warning or ""

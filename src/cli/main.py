"""Main CLI entry point using Typer."""

import logging
from typing import Optional

import click
import typer
from rich.console import Console
from typer.core import TyperGroup

from .. import __version__
from ..cluster.client import OcClient, ToolNotFoundError
from ..cluster.credentials import CredentialValidationError, require_oc, validate_credentials
from ..restore.audit import AuditStorage
from ..restore.cleaner import ResourceCleaner
from ..restore.reporter import RevertReporter
from ..snapshot.storage import BaselineNotFoundError, SnapshotStorage
from ..utils.logging import setup_logging
from .config import Config, ConfigError

logger = logging.getLogger(__name__)


class UnknownActionError(click.UsageError):
    """Usage error for an unknown subcommand; exits 1 like other precondition failures."""

    exit_code = 1


class ActionGroup(TyperGroup):
    """Command group that reports unknown subcommands with exit code 1."""

    def parse_args(self, ctx: click.Context, args: list) -> list:
        if not args:
            click.echo(ctx.get_help(), color=ctx.color)
            ctx.exit(0)
        return super().parse_args(ctx, args)

    def resolve_command(self, ctx: click.Context, args: list):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            raise UnknownActionError(f"{e.message} (use snapshot|revert)", ctx=ctx) from e


# Create Typer app
app = typer.Typer(
    name="oc-revert",
    cls=ActionGroup,
    help="Snapshot OpenShift cluster state and revert changes made since the snapshot.",
    add_completion=False,
)

# Create Rich console for output
console = Console()

# Global config
config: Optional[Config] = None


@app.callback()
def main(
    config_file: Optional[str] = typer.Option(
        None, "--config", help="Config file (default: ./.oc-revert.yaml or ~/.oc-revert/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress output except errors"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
):
    """Snapshot OpenShift cluster state and revert changes made since the snapshot.

    \b
    Snapshot stores namespaces, the OAuth CR, and Secret and Template names
    from openshift-config. Revert ensures the self-provisioner binding,
    restores OAuth, resets project defaults, and deletes namespaces, Secrets
    and Templates created after the snapshot. Use --dry-run to preview.
    """
    global config

    # Load configuration
    try:
        config = Config.load(config_file)
    except ConfigError as e:
        console.print(f"✗ Invalid configuration: {e}", style="bold red")
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
    console.print(f"oc-revert version {__version__}")


def _prepare(kubeconfig: Optional[str], baseline_dir: Optional[str]) -> tuple[OcClient, SnapshotStorage, dict]:
    """Apply option overrides, then check the oc binary and cluster login."""
    if kubeconfig:
        config.kubeconfig = kubeconfig
    if baseline_dir:
        config.baseline_dir = baseline_dir

    require_oc(config.oc_binary)
    client = OcClient(
        binary=config.oc_binary,
        kubeconfig=config.kubeconfig,
        request_timeout=config.request_timeout,
    )
    identity = validate_credentials(client)
    storage = SnapshotStorage(config.baseline_dir, config_namespace=config.config_namespace)
    return client, storage, identity


@app.command()
def snapshot(
    kubeconfig: Optional[str] = typer.Option(
        None, "--kubeconfig", help="Kubeconfig path (default: ./.kube/config)"
    ),
    baseline_dir: Optional[str] = typer.Option(
        None, "--baseline-dir", help="Baseline directory (default: .oc-baseline)"
    ),
):
    """Capture the current cluster state as the baseline.

    Re-running replaces the previous baseline.
    """
    try:
        client, storage, identity = _prepare(kubeconfig, baseline_dir)
        console.print(f"✓ Authenticated as: {identity['user']} ({identity['server']})\n", style="green")

        cleaner = ResourceCleaner(client=client, snapshot_storage=storage, config=config)
        baseline = cleaner.snapshot(identity=identity)

        console.print("\n✓ Snapshot complete!", style="bold green")
        RevertReporter(console).display_baseline(baseline, str(storage.storage_dir))

    except typer.Exit:
        raise
    except ToolNotFoundError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    except CredentialValidationError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error creating snapshot: {e}", style="bold red")
        logger.exception("Error in snapshot command")
        raise typer.Exit(code=2)


@app.command()
def revert(
    kubeconfig: Optional[str] = typer.Option(
        None, "--kubeconfig", help="Kubeconfig path (default: ./.kube/config)"
    ),
    baseline_dir: Optional[str] = typer.Option(
        None, "--baseline-dir", help="Baseline directory (default: .oc-baseline)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview actions without changing the cluster"),
):
    """Revert the cluster to the baseline.

    \b
    Steps, in order:
      1. Ensure self-provisioner is bound to system:authenticated:oauth
      2. Restore OAuth from baseline
      3. Reset project config to defaults (clears projectRequestTemplate)
      4. Delete namespaces created after snapshot (skips kube-*, openshift*, default)
      5. Delete new Secrets in openshift-config
      6. Delete new Templates in openshift-config
    """
    try:
        client, storage, identity = _prepare(kubeconfig, baseline_dir)

        metadata = storage.load_metadata()
        console.print(f"🔍 Comparing to baseline: [bold]{storage.storage_dir}[/bold]")
        if metadata is not None:
            console.print(f"   Captured: {metadata.captured_at.strftime('%Y-%m-%d %H:%M:%S UTC')} by {metadata.user}")
            if metadata.server not in ("unknown", identity["server"]):
                console.print(
                    f"⚠️  Baseline was captured against {metadata.server}, "
                    f"current server is {identity['server']}",
                    style="yellow",
                )
        if dry_run:
            console.print("🧪 Dry run: no changes will be made", style="cyan")
        console.print()

        cleaner = ResourceCleaner(
            client=client,
            snapshot_storage=storage,
            config=config,
            audit_storage=AuditStorage(storage.storage_dir / "audit-logs"),
        )
        operation = cleaner.revert(dry_run=dry_run, identity=identity)

        RevertReporter(console).display(operation)

        if operation.failed_count:
            console.print(
                f"⚠️  {operation.failed_count} item(s) failed; re-run revert after fixing the cause",
                style="yellow",
            )

    except typer.Exit:
        raise
    except BaselineNotFoundError as e:
        console.print(f"✗ {e}", style="bold red")
        raise typer.Exit(code=1)
    except ToolNotFoundError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    except CredentialValidationError as e:
        console.print(f"✗ Error: {e}", style="bold red")
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"✗ Error during revert: {e}", style="bold red")
        logger.exception("Error in revert command")
        raise typer.Exit(code=2)


def cli_main():
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    cli_main()

# SPDX-License-Identifier: MIT
"""CLI entry point for the tf-registry command."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from .config import ConfigError, RegistryConfig
from .errors import SnapshotError
from .index import ModuleIndex
from .logging_config import configure_logging
from .snapshot import SnapshotStore
from .storage import ModuleStorage


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[RegistryConfig] = None
        self.verbose: bool = False

    def load_config(self, data_dir: Optional[Path] = None) -> RegistryConfig:
        """Load configuration from the environment, caching the result."""
        if self.config is None:
            self.config = RegistryConfig.from_env()
        if data_dir is not None:
            self.config.storage.data_dir = str(data_dir)
        if self.verbose:
            self.config.log_level = "DEBUG"
        return self.config


pass_context = click.make_pass_decorator(Context, ensure=True)

data_dir_option = click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Storage root. Defaults to $DATA_DIR or /.privateterraformregistry/data.",
)


def echo_error(message: str) -> None:
    """Print an error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def echo_success(message: str) -> None:
    """Print a success message."""
    click.secho(message, fg="green")


def _snapshot_store(config: RegistryConfig) -> SnapshotStore:
    """Snapshot store backed by a fresh, empty index."""
    return SnapshotStore(config.storage.data_dir, ModuleIndex(), filename=config.storage.snapshot_name)


@click.group()
@click.version_option(package_name="private-terraform-registry")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@pass_context
def cli(ctx: Context, verbose: bool) -> None:
    """Private Terraform module registry.

    \b
    Examples:
        tf-registry serve --port 8080
        tf-registry list
        tf-registry rebuild-index --data-dir ./data
    """
    ctx.verbose = verbose


@cli.command()
@click.option("--host", default=None, help="Interface to bind.")
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Port to listen on.")
@click.option("--max-upload-size", type=click.IntRange(min=1), default=None, help="Upload ceiling in bytes.")
@click.option("--log-level", default=None, help="Root log level (DEBUG, INFO, WARNING, ...).")
@data_dir_option
@pass_context
def serve(
    ctx: Context,
    host: Optional[str],
    port: Optional[int],
    max_upload_size: Optional[int],
    log_level: Optional[str],
    data_dir: Optional[Path],
) -> None:
    """Run the registry HTTP server."""
    import uvicorn

    from .app import create_app

    config = ctx.load_config(data_dir)
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if max_upload_size:
        config.storage.max_upload_size = max_upload_size
    if log_level:
        config.log_level = log_level.upper()

    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.log_level.lower(),
        timeout_keep_alive=config.server.timeout_keep_alive,
        timeout_graceful_shutdown=config.server.timeout_graceful_shutdown,
    )


@cli.command("rebuild-index")
@data_dir_option
@pass_context
def rebuild_index(ctx: Context, data_dir: Optional[Path]) -> None:
    """Regenerate data.json from the archives in the storage root."""
    config = ctx.load_config(data_dir)
    configure_logging(config.log_level)

    snapshot = _snapshot_store(config)
    count = snapshot.rebuild(ModuleStorage(config.storage.data_dir))
    echo_success(f"Indexed {count} module version(s) into {snapshot.path}")


@cli.command("list")
@click.option("--namespace", default=None, help="Only show modules in this namespace.")
@data_dir_option
@pass_context
def list_modules(ctx: Context, namespace: Optional[str], data_dir: Optional[Path]) -> None:
    """Print the module versions recorded in the snapshot."""
    config = ctx.load_config(data_dir)

    snapshot = _snapshot_store(config)
    snapshot.load()
    for identity in snapshot.index:
        if namespace is None or identity.namespace == namespace:
            click.echo(str(identity))


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except (ConfigError, SnapshotError) as e:
        echo_error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()

"""Main CLI entry point for relaynode."""

import sys
from pathlib import Path

import typer

from relaynode import __version__
from relaynode.api.app import create_app, run_server
from relaynode.application.state import AppState
from relaynode.bootstrap import start_node
from relaynode.domain.enums import Network
from relaynode.domain.value_objects import SeedMaterial
from relaynode.exceptions import RelayNodeError
from relaynode.utils.config import load_settings
from relaynode.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="relaynode",
    help="Control plane for a single Lightning relay node",
    no_args_is_help=True,
)

logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"relaynode {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version"
    ),
) -> None:
    """Lightning relay node control plane."""


@app.command()
def serve(
    data_dir: Path | None = typer.Option(None, help="Directory for the node's storage"),
    rpc_port: int | None = typer.Option(None, help="Port for control plane requests"),
    rpc_host: str | None = typer.Option(None, help="Address for control plane requests"),
    node_service_port: int | None = typer.Option(None, help="Port for peer connections"),
    esplora_url: str | None = typer.Option(None, help="Esplora server URL"),
    rgs_url: str | None = typer.Option(None, help="Rapid gossip sync server URL"),
    network: Network | None = typer.Option(None, help="Bitcoin network"),
    seed_hex: str | None = typer.Option(
        None, help="Node seed as 128 hex characters; generated and printed if omitted"
    ),
    worker_threads: int | None = typer.Option(None, help="Threads for blocking node calls"),
    log_level: str | None = typer.Option(None, help="DEBUG, INFO, WARNING or ERROR"),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format"),
):
    """Start the node and serve the control plane until interrupted."""
    try:
        settings = load_settings(
            data_dir=data_dir,
            rpc_port=rpc_port,
            rpc_host=rpc_host,
            node_service_port=node_service_port,
            esplora_url=esplora_url,
            rgs_url=rgs_url,
            network=network,
            seed_hex=seed_hex,
            worker_threads=worker_threads,
            log_level=log_level,
            json_logs=json_logs,
        )
    except RelayNodeError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1)

    # Colored console output only when a terminal is watching
    configure_logging(
        settings.log_level, json_logs=settings.json_logs, dev_mode=sys.stderr.isatty()
    )

    try:
        node = start_node(settings)
    except RelayNodeError as e:
        logger.error("startup_failed", error=str(e), error_type=type(e).__name__)
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1)

    try:
        state = AppState.create(node, settings.worker_threads)
        typer.echo(f"starting http server on port: {settings.rpc_port}")
        run_server(create_app(state), host=settings.rpc_host, port=settings.rpc_port)
    finally:
        node.stop()


@app.command("generate-seed")
def generate_seed() -> None:
    """Print a fresh 64 byte seed as hex."""
    typer.echo(SeedMaterial.generate().hex())


if __name__ == "__main__":
    app()

"""CLI for running the signaling relay."""

import asyncio
import signal
import sys

import click
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel

from sigrelay.config import settings
from sigrelay.logger import define_log_level
from sigrelay.ws.server import RelayWebSocketServer


console = Console()


async def run_server(server: RelayWebSocketServer) -> int:
    """Run the relay until SIGINT/SIGTERM."""
    loop = asyncio.get_running_loop()
    shutdown_requested = False

    def handle_shutdown():
        nonlocal shutdown_requested
        if not shutdown_requested:
            shutdown_requested = True
            console.print("\n🛑 Shutting down relay...")
            loop.create_task(server.shutdown())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, handle_shutdown)
        except NotImplementedError:
            # Not supported on Windows event loops; Ctrl+C still raises
            pass

    try:
        await server.start_server()
        return 0
    except OSError as e:
        console.print(f"❌ Could not listen on {server.host}:{server.port}: {e}", style="red")
        return 1


@click.group()
@click.version_option(package_name="sigrelay", prog_name="sigrelay")
def cli():
    """Signaling relay for host/client WebRTC sessions."""


@cli.command()
@click.option("--host", default=None, help=f"Bind address (default: {settings.host})")
@click.option("--port", type=int, default=None, help=f"Bind port (default: {settings.port})")
@click.option("--log-level", default=None, help=f"Log level (default: {settings.log_level})")
@click.option(
    "--snapshot-interval",
    type=float,
    default=None,
    help="Seconds between registry snapshots in the log, 0 to disable",
)
@click.option("--debug", is_flag=True, help="Shortcut for --log-level DEBUG")
def serve(host, port, log_level, snapshot_interval, debug):
    """Run the relay."""
    define_log_level("DEBUG" if debug else (log_level or settings.log_level))

    server = RelayWebSocketServer(host=host, port=port, snapshot_interval=snapshot_interval)
    console.print(
        Panel(
            f"Endpoint: ws://{server.host}:{server.port}\n"
            f"Snapshot interval: {server.snapshot_interval or 'off'}",
            title="sigrelay",
        )
    )

    try:
        code = asyncio.run(run_server(server))
    except KeyboardInterrupt:
        console.print("\n🛑 Relay stopped")
        code = 130
    sys.exit(code)


@cli.command("config")
def show_config():
    """Print the effective settings."""
    console.print(JSON.from_data(settings.model_dump()))

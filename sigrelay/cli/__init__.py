"""Command-line entry points for the signaling relay."""

from .server import cli

__all__ = ["cli", "main"]


def main():
    """Main entry point for the sigrelay CLI."""
    cli()

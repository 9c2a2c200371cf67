"""
sigrelay CLI

Usage:
    python -m sigrelay.cli serve [--host HOST] [--port PORT]
    python -m sigrelay.cli config
"""

from .server import cli

if __name__ == '__main__':
    cli()

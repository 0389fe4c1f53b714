"""CLI commands for bundlectl.

This package contains all subcommand implementations.
"""

from bundlectl.cli.commands import collect, config

__all__ = ["collect", "config"]

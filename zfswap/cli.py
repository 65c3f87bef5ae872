#!/usr/bin/env python3
"""zfswap CLI - swap files on ZFS without the swap/ARC deadlock."""

import typer
from rich.console import Console

from zfswap.cli_startup_commands import register_startup_commands
from zfswap.cli_swap_commands import register_swap_commands

app = typer.Typer(
    name="zfswap",
    help="""zfswap - Swap files on dedicated ZFS datasets, attached through loop devices

Quick start:
  zfswap swap -z tank -d swap -s 8G -c    # Create dataset and enable swap
  zfswap unit -z tank -d swap -s 8G -c    # Print a systemd unit for boot
  zfswap start --config /etc/zfswap/zfswap.yml   # Unlock pool, start container

More commands: zfswap --help
""",
    add_completion=False,
)

console = Console()

register_swap_commands(app, console)
register_startup_commands(app, console)

if __name__ == "__main__":
    app()

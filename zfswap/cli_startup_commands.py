"""Startup CLI command - unlock encrypted pool and start its container."""
from typing import Optional

import typer
from rich.console import Console

from zfswap.cli_support import (
    handle_cli_error,
    is_mock,
    print_success,
    require_root,
    setup_file_logging,
    setup_syslog,
)
from zfswap.core.config import load_config
from zfswap.core.errors import ZfswapError
from zfswap.core.logger import get_logger
from zfswap.core.startup import StartupSequence

# Module-level console instance (will be set by register function)
console: Console = Console()
logger = get_logger(__name__)

SYSLOG_TAG = "zfswap-start"


def start(
    key_file: Optional[str] = typer.Option(None, "--key-file", help="LUKS key file"),
    luks_name: Optional[str] = typer.Option(None, "--luks-name", help="Name for the opened LUKS mapping"),
    device: Optional[str] = typer.Option(None, "--device", help="Encrypted block device (e.g. /dev/disk/by-id/...)"),
    pool: Optional[str] = typer.Option(None, "--pool", help="ZFS pool to import"),
    filesystem: Optional[str] = typer.Option(None, "--filesystem", help="ZFS filesystem to mount"),
    container: Optional[str] = typer.Option(None, "--container", help="Container ID to start"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
    syslog: bool = typer.Option(True, "--syslog/--no-syslog", help="Also log to syslog"),
):
    """Open a LUKS volume, import its pool, mount a filesystem and start a container.

    Settings not given on the command line come from the 'startup' section
    of the config file.
    """
    try:
        effective = load_config(config)
        flags = {
            'key_file': key_file,
            'luks_name': luks_name,
            'device': device,
            'pool': pool,
            'filesystem': filesystem,
            'container': container,
        }
        effective = effective.merged(
            {'startup': {k: v for k, v in flags.items() if v is not None}},
            source="command line",
        )
        mock = is_mock()
        sequence = StartupSequence(effective.startup, mock=mock)
    except ZfswapError as e:
        handle_cli_error(e, console, verbose=verbose, exit_code=2)

    require_root(console, mock=mock)
    setup_file_logging(log_file=log_file, verbose=verbose)
    if syslog:
        setup_syslog(SYSLOG_TAG)

    try:
        sequence.run()
    except ZfswapError as e:
        logger.error(str(e))
        handle_cli_error(e, console, verbose=verbose)

    print_success(console, f"Container {effective.startup.container} is up")


def register_startup_commands(app: typer.Typer, shared_console: Console):
    """Register startup commands with the main Typer app."""
    global console
    console = shared_console

    app.command()(start)

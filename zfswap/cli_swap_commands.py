"""Swap CLI commands - swap, unit."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from zfswap.cli_support import (
    handle_cli_error,
    is_mock,
    print_error,
    print_success,
    print_warning,
    require_root,
    setup_file_logging,
    setup_syslog,
)
from zfswap.core.config import SwapConfig, load_config, split_pools
from zfswap.core.errors import ConfigError, ZfswapError
from zfswap.core.logger import get_logger
from zfswap.core.orchestrator import SwapProvisioner
from zfswap.core.sizes import parse_size
from zfswap.services.systemd import UNIT_DIR, install_unit, render_unit

# Module-level console instance (will be set by register function)
console: Console = Console()
logger = get_logger(__name__)

SYSLOG_TAG = "zfswap-swap"


def _effective_config(
    config: Optional[str],
    pools: Optional[str],
    dataset: Optional[str],
    size: Optional[str],
    create: Optional[bool],
    mountpoint: Optional[str],
    keep_existing: Optional[bool],
    attributes: Optional[dict] = None,
) -> SwapConfig:
    """Merge CLI flags over the config file and validate required values.

    Exits with status 2 on usage errors.
    """
    try:
        effective = load_config(config)
        overrides = {'attributes': attributes or {}}
        if pools is not None:
            overrides['pools'] = split_pools(pools)
        if dataset is not None:
            overrides['dataset'] = dataset
        if size is not None:
            overrides['size'] = size
        if mountpoint is not None:
            overrides['mountpoint'] = mountpoint
        if create is not None:
            overrides['create'] = create
        if keep_existing is not None:
            overrides['keep_existing'] = keep_existing
        effective = effective.merged(overrides, source="command line")

        missing = [
            flag for flag, value in (
                ("-z/--zpools", effective.pools),
                ("-d/--dataset", effective.dataset),
                ("-s/--size", effective.size),
            ) if not value
        ]
        if missing:
            raise ConfigError(f"Missing required options: {', '.join(missing)}")

        parse_size(effective.size)
    except ConfigError as e:
        print_error(console, str(e))
        console.print(
            "Usage: zfswap swap -z <zpool1,zpool2,...> -d <dataset> -s <swap_size> [-c] [options]",
            markup=False,
        )
        raise typer.Exit(2)

    return effective


def swap(
    zpools: Optional[str] = typer.Option(None, "--zpools", "-z", help="ZFS pool names (comma-separated)"),
    dataset: Optional[str] = typer.Option(None, "--dataset", "-d", help="ZFS dataset name"),
    size: Optional[str] = typer.Option(None, "--size", "-s", help="Swap file size (e.g., 7G)"),
    create: Optional[bool] = typer.Option(None, "--create/--no-create", "-c", help="Create the ZFS dataset if it does not exist"),
    dedup: Optional[str] = typer.Option(None, "--dedup", "-D", help="Set deduplication (default: off)"),
    compression: Optional[str] = typer.Option(None, "--compression", "-C", help="Set compression (default: zle)"),
    logbias: Optional[str] = typer.Option(None, "--logbias", "-L", help="Set logbias (default: throughput)"),
    atime: Optional[str] = typer.Option(None, "--atime", "-A", help="Set atime (default: off)"),
    relatime: Optional[str] = typer.Option(None, "--relatime", "-R", help="Set relatime (default: off)"),
    recordsize: Optional[str] = typer.Option(None, "--recordsize", "-x", help="Set recordsize (default: 8k)"),
    sync: Optional[str] = typer.Option(None, "--sync", "-S", help="Set sync (default: always)"),
    checksum: Optional[str] = typer.Option(None, "--checksum", "-H", help="Set checksum (default: fletcher4)"),
    primarycache: Optional[str] = typer.Option(None, "--primarycache", "-P", help="Set primarycache (default: none)"),
    secondarycache: Optional[str] = typer.Option(None, "--secondarycache", "-Q", help="Set secondarycache (default: none)"),
    auto_snapshot: Optional[str] = typer.Option(None, "--auto-snapshot", "-Y", help="Set auto-snapshot (default: false)"),
    mountpoint: Optional[str] = typer.Option(None, "--mountpoint", help="Fixed swap dataset mountpoint (default: /swap)"),
    keep_existing: Optional[bool] = typer.Option(None, "--keep-existing/--no-keep-existing", help="Skip pools whose swap file already exists"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
    syslog: bool = typer.Option(True, "--syslog/--no-syslog", help="Also log to syslog"),
):
    """Create swap files on ZFS datasets and enable them through loop devices.

    Examples:
        zfswap swap -z zfspool1,zfspool2 -d swap -s 7G -c
        zfswap swap -z tank -d swap -s 4G -c -C lz4 -x 16k
    """
    attributes = {
        'dedup': dedup,
        'compression': compression,
        'logbias': logbias,
        'atime': atime,
        'relatime': relatime,
        'recordsize': recordsize,
        'sync': sync,
        'checksum': checksum,
        'primarycache': primarycache,
        'secondarycache': secondarycache,
        'auto_snapshot': auto_snapshot,
    }
    effective = _effective_config(
        config, zpools, dataset, size, create, mountpoint, keep_existing, attributes
    )

    mock = is_mock()
    require_root(console, mock=mock)
    setup_file_logging(log_file=log_file, verbose=verbose)
    if syslog:
        setup_syslog(SYSLOG_TAG)

    provisioner = SwapProvisioner.from_config(effective, mock=mock)
    try:
        results = provisioner.run()
    except ZfswapError as e:
        logger.error(str(e))
        handle_cli_error(e, console, verbose=verbose)

    table = Table(title="Swap Provisioning")
    table.add_column("Pool", style="cyan")
    table.add_column("Dataset", style="green")
    table.add_column("Loop Device", style="magenta")
    for result in results:
        table.add_row(
            result.pool,
            result.dataset,
            "skipped" if result.skipped else result.device.path,
        )
    console.print(table)

    if mock:
        print_warning(console, "MOCK MODE - No changes applied")
    print_success(console, f"Swap provisioned on {len(results)} pool(s)")


def unit(
    zpools: Optional[str] = typer.Option(None, "--zpools", "-z", help="ZFS pool names (comma-separated)"),
    dataset: Optional[str] = typer.Option(None, "--dataset", "-d", help="ZFS dataset name"),
    size: Optional[str] = typer.Option(None, "--size", "-s", help="Swap file size (e.g., 7G)"),
    create: Optional[bool] = typer.Option(None, "--create/--no-create", "-c", help="Create the ZFS dataset if it does not exist"),
    mountpoint: Optional[str] = typer.Option(None, "--mountpoint", help="Fixed swap dataset mountpoint"),
    keep_existing: Optional[bool] = typer.Option(None, "--keep-existing/--no-keep-existing", help="Skip pools whose swap file already exists"),
    config: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    executable: str = typer.Option("/usr/local/bin/zfswap", "--executable", help="zfswap binary used in ExecStart"),
    install: bool = typer.Option(False, "--install", help="Write the unit and enable it"),
    unit_dir: Path = typer.Option(UNIT_DIR, "--unit-dir", help="Directory for the unit file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Render (or install) a systemd unit that provisions swap at boot."""
    effective = _effective_config(config, zpools, dataset, size, create, mountpoint, keep_existing)

    try:
        text = render_unit(effective, executable=executable)
    except ConfigError as e:
        handle_cli_error(e, console, verbose=verbose, exit_code=2)

    if not install:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
        return

    mock = is_mock()
    require_root(console, mock=mock)
    try:
        unit_path = install_unit(text, unit_dir=unit_dir, mock=mock)
    except ZfswapError as e:
        logger.error(str(e))
        handle_cli_error(e, console, verbose=verbose)
    print_success(console, f"Installed {unit_path}")


def register_swap_commands(app: typer.Typer, shared_console: Console):
    """Register swap commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(swap)
    app.command()(unit)

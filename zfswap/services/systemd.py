"""Systemd oneshot unit that provisions swap at boot."""
import shlex
from dataclasses import fields
from pathlib import Path
from typing import List

from zfswap.core.commands import run_command
from zfswap.core.config import DEFAULT_MOUNTPOINT, DatasetAttributes, SwapConfig, mock_enabled
from zfswap.core.errors import ConfigError, ExternalToolFailure
from zfswap.core.logger import get_logger

logger = get_logger(__name__)

UNIT_NAME = "zfswap.service"
UNIT_DIR = Path("/etc/systemd/system")

UNIT_TEMPLATE = """\
[Unit]
Description=Provision swap files on ZFS datasets ({pools})
After=zfs-mount.service
Requires=zfs-mount.service

[Service]
Type=oneshot
RemainAfterExit=yes
ExecStart={exec_start}

[Install]
WantedBy=multi-user.target
"""

# attribute name -> long CLI option of `zfswap swap`
ATTRIBUTE_OPTIONS = {
    'dedup': '--dedup',
    'compression': '--compression',
    'logbias': '--logbias',
    'atime': '--atime',
    'relatime': '--relatime',
    'recordsize': '--recordsize',
    'sync': '--sync',
    'checksum': '--checksum',
    'primarycache': '--primarycache',
    'secondarycache': '--secondarycache',
    'auto_snapshot': '--auto-snapshot',
}


def swap_command_args(config: SwapConfig) -> List[str]:
    """Arguments of `zfswap swap` that reproduce ``config``.

    Attributes left at their defaults are omitted.
    """
    if not config.pools or not config.dataset or not config.size:
        raise ConfigError("Pools, dataset and size are required to render a unit")

    args = ["swap", "-z", ",".join(config.pools), "-d", config.dataset, "-s", config.size]
    if config.create:
        args.append("-c")
    if config.mountpoint != DEFAULT_MOUNTPOINT:
        args.extend(["--mountpoint", config.mountpoint])
    if config.keep_existing:
        args.append("--keep-existing")

    defaults = DatasetAttributes()
    for f in fields(DatasetAttributes):
        value = getattr(config.attributes, f.name)
        if value != getattr(defaults, f.name):
            args.extend([ATTRIBUTE_OPTIONS[f.name], value])
    return args


def render_unit(config: SwapConfig, executable: str = "/usr/local/bin/zfswap") -> str:
    """Render the unit file text for ``config``."""
    exec_start = " ".join(shlex.quote(part) for part in [executable, *swap_command_args(config)])
    return UNIT_TEMPLATE.format(pools=", ".join(config.pools), exec_start=exec_start)


def install_unit(text: str, unit_dir: Path = UNIT_DIR, mock: bool = False) -> Path:
    """Write the unit file, reload systemd and enable the unit.

    Returns:
        Path of the written unit file

    Raises:
        ExternalToolFailure: If writing the file or systemctl fails
    """
    mock = mock or mock_enabled()
    unit_path = Path(unit_dir) / UNIT_NAME

    if mock:
        logger.info(f"MOCK: Would write {unit_path} and enable {UNIT_NAME}")
        return unit_path

    try:
        unit_path.parent.mkdir(parents=True, exist_ok=True)
        unit_path.write_text(text)
    except OSError as e:
        raise ExternalToolFailure(f"write {unit_path}", ["tee", str(unit_path)], os_error=e) from e
    logger.info(f"Wrote {unit_path}")

    run_command(["systemctl", "daemon-reload"], "reload systemd units")
    run_command(["systemctl", "enable", UNIT_NAME], f"enable {UNIT_NAME}")
    logger.info(f"Enabled {UNIT_NAME}")
    return unit_path

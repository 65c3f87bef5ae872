"""Swap file materialization and activation on a mounted dataset."""
import os
from pathlib import Path
from typing import Union

from zfswap.core.commands import command_succeeds, run_command
from zfswap.core.config import SWAPFILE_NAME, mock_enabled
from zfswap.core.errors import ExternalToolFailure, NotMounted
from zfswap.core.logger import get_logger
from zfswap.core.loop_devices import LoopDevice, LoopDeviceAllocator
from zfswap.core.sizes import format_size, parse_size

logger = get_logger(__name__)

SWAPFILE_MODE = 0o600


class MountInspector:
    """Answers whether a path is an active mount point."""

    def __init__(self, mock: bool = False):
        self.mock = mock or mock_enabled()

    def is_mount_point(self, path: Union[str, Path]) -> bool:
        if self.mock:
            logger.info(f"MOCK: Assuming {path} is a mount point")
            return True
        return command_succeeds(["mountpoint", "-q", str(path)])


class SwapActivator:
    """Recreates the swap file on a mounted dataset and swaps on it via a loop device.

    Every step must succeed before the next one starts. A failure leaves
    whatever was already done in place for the operator to inspect.
    """

    def __init__(
        self,
        allocator: LoopDeviceAllocator,
        inspector: MountInspector,
        mock: bool = False,
    ):
        self.allocator = allocator
        self.inspector = inspector
        self.mock = mock or mock_enabled()

    @staticmethod
    def swapfile_path(mount_path: Union[str, Path]) -> Path:
        return Path(mount_path) / SWAPFILE_NAME

    def swapfile_exists(self, mount_path: Union[str, Path]) -> bool:
        """Whether a swap file is already present under ``mount_path``."""
        swapfile = self.swapfile_path(mount_path)
        if self.mock:
            logger.info(f"MOCK: Assuming {swapfile} does not exist")
            return False
        return swapfile.exists()

    def activate_swap(self, mount_path: Union[str, Path], size: Union[str, int]) -> LoopDevice:
        """Materialize a swap file of ``size`` bytes under ``mount_path`` and enable it.

        Args:
            mount_path: Mountpoint of the swap dataset
            size: Size in bytes or a size string such as '7G'

        Returns:
            The loop device the swap file is attached to

        Raises:
            NotMounted: If mount_path is not mounted (nothing is modified)
            NoFreeDevice: If no loop device is free
            ExternalToolFailure: If any tool or file operation fails
        """
        size_bytes = size if isinstance(size, int) else parse_size(size)
        swapfile = self.swapfile_path(mount_path)

        if not self.inspector.is_mount_point(mount_path):
            logger.error(f"{mount_path} is not a mount point. Exiting.")
            raise NotMounted(str(mount_path))
        logger.info(f"{mount_path} is a mount point.")

        self._remove(swapfile)
        logger.info(f"Removed existing {swapfile}")

        self._allocate(swapfile, size_bytes)
        logger.info(f"Allocated a new {format_size(size_bytes)} {swapfile}")

        self._restrict_permissions(swapfile)
        logger.info(f"Set permissions on {swapfile} to {SWAPFILE_MODE:04o}")

        self._run(["mkswap", str(swapfile)], f"create swap area on {swapfile}")
        logger.info(f"Created swap area on {swapfile}")

        device = self.allocator.allocate()
        logger.info(f"Using loop device: {device}")

        self.allocator.bind(str(swapfile), device)
        logger.info(f"Loop device {device} set up for {swapfile}")

        self._run(["swapon", device.path], f"enable swap on {device}")
        logger.info(f"Swap enabled on {device}")

        return device

    def _run(self, cmd, action: str) -> None:
        if self.mock:
            logger.info(f"MOCK: Would run {' '.join(cmd)}")
            return
        run_command(cmd, action)

    def _remove(self, swapfile: Path) -> None:
        if self.mock:
            logger.info(f"MOCK: Would remove {swapfile}")
            return
        try:
            swapfile.unlink(missing_ok=True)
        except OSError as e:
            raise ExternalToolFailure(f"remove {swapfile}", ["rm", "-f", str(swapfile)], os_error=e) from e

    def _allocate(self, swapfile: Path, size_bytes: int) -> None:
        if self.mock:
            logger.info(f"MOCK: Would allocate {size_bytes} bytes at {swapfile}")
            return
        cmd = ["fallocate", "-l", str(size_bytes), str(swapfile)]
        try:
            fd = os.open(swapfile, os.O_WRONLY | os.O_CREAT | os.O_EXCL, SWAPFILE_MODE)
            try:
                os.posix_fallocate(fd, 0, size_bytes)
            finally:
                os.close(fd)
        except OSError as e:
            raise ExternalToolFailure(f"allocate {swapfile}", cmd, os_error=e) from e

    def _restrict_permissions(self, swapfile: Path) -> None:
        if self.mock:
            logger.info(f"MOCK: Would chmod {SWAPFILE_MODE:04o} {swapfile}")
            return
        try:
            os.chmod(swapfile, SWAPFILE_MODE)
        except OSError as e:
            raise ExternalToolFailure(
                f"set permissions on {swapfile}",
                ["chmod", f"{SWAPFILE_MODE:04o}", str(swapfile)],
                os_error=e,
            ) from e

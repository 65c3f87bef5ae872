"""Loop device discovery and binding."""
from dataclasses import dataclass

from zfswap.core.commands import command_succeeds, run_command
from zfswap.core.config import MAX_LOOP_INDEX, mock_enabled
from zfswap.core.errors import NoFreeDevice
from zfswap.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoopDevice:
    """A slot in the /dev/loopN namespace."""

    index: int

    @property
    def path(self) -> str:
        return f"/dev/loop{self.index}"

    def __str__(self) -> str:
        return self.path


class LoopDeviceAllocator:
    """Finds free loop devices and binds files to them.

    Devices are never released here; detaching is left to the operator.
    """

    def __init__(self, max_index: int = MAX_LOOP_INDEX, mock: bool = False):
        self.max_index = max_index
        self.mock = mock or mock_enabled()
        self._mock_bound = set()

    def is_bound(self, device: LoopDevice) -> bool:
        """True if ``losetup <device>`` reports a backing file."""
        if self.mock:
            return device.index in self._mock_bound
        return command_succeeds(["losetup", device.path])

    def allocate(self) -> LoopDevice:
        """Return the lowest-numbered loop device with no backing file.

        Raises:
            NoFreeDevice: If every device up to max_index is bound
        """
        for index in range(self.max_index + 1):
            device = LoopDevice(index)
            if not self.is_bound(device):
                return device

        logger.error("No available loop devices")
        raise NoFreeDevice(self.max_index)

    def bind(self, path: str, device: LoopDevice) -> None:
        """Attach ``path`` to ``device``."""
        if self.mock:
            logger.info(f"MOCK: Would attach {path} to {device}")
            self._mock_bound.add(device.index)
            return

        run_command(["losetup", device.path, str(path)], f"set up {device} for {path}")

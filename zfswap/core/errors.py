"""Failure taxonomy for swap provisioning and startup.

Every error here is fatal: nothing in zfswap.core recovers from them. The
CLI logs the message and exits non-zero.
"""
from typing import List, Optional


class ZfswapError(Exception):
    """Base class for all zfswap failures."""
    pass


class ConfigError(ZfswapError):
    """Raised for unreadable configuration or invalid values."""
    pass


class NoFreeDevice(ZfswapError):
    """Raised when every loop device in the namespace is bound."""

    def __init__(self, max_index: int):
        self.max_index = max_index
        super().__init__(f"No available loop devices (checked /dev/loop0 to /dev/loop{max_index})")


class ExistsWithWrongMountpoint(ZfswapError):
    """Raised when an existing dataset is mounted somewhere unexpected."""

    def __init__(self, dataset: str, actual: str, expected: str):
        self.dataset = dataset
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Dataset {dataset} already exists with mountpoint '{actual}', expected '{expected}'"
        )


class NotMounted(ZfswapError):
    """Raised when the swap mountpoint is not an active mount."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} is not a mount point")


class ExternalToolFailure(ZfswapError):
    """Raised when a collaborator command fails or cannot be executed."""

    def __init__(
        self,
        action: str,
        cmd: List[str],
        returncode: Optional[int] = None,
        stderr: str = "",
        os_error: Optional[OSError] = None,
    ):
        self.action = action
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        self.os_error = os_error

        # os_error: the step ran in-process, cmd names the equivalent tool
        if os_error is not None:
            reason = f"{cmd[0]}: {os_error.strerror or os_error}"
        elif returncode is None:
            reason = f"command '{cmd[0]}' not found"
        else:
            reason = f"command '{' '.join(cmd)}' exited with status {returncode}"
        if self.stderr:
            reason = f"{reason}: {self.stderr}"
        super().__init__(f"Failed to {action}: {reason}")

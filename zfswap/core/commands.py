"""Thin wrapper around subprocess for external tool invocations."""
import subprocess
from typing import List

from zfswap.core.errors import ExternalToolFailure
from zfswap.core.logger import get_logger

logger = get_logger(__name__)


def run_command(cmd: List[str], action: str) -> subprocess.CompletedProcess:
    """Run a command and raise ExternalToolFailure if it fails.

    Args:
        cmd: Command and arguments
        action: Short description of what the command does, used in errors
            (e.g. 'create dataset tank/swap')

    Returns:
        Completed process with captured text output
    """
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        return subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise ExternalToolFailure(action, cmd, e.returncode, e.stderr) from e
    except FileNotFoundError as e:
        raise ExternalToolFailure(action, cmd) from e


def command_succeeds(cmd: List[str]) -> bool:
    """Run a probe command and report whether it exited with status 0.

    Used for yes/no questions such as 'is this loop device bound?'.
    A missing binary counts as a failed probe.
    """
    logger.debug(f"Probing: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        return False
    return result.returncode == 0

"""Proxmox container lifecycle (start only)."""
from zfswap.core.commands import run_command
from zfswap.core.config import mock_enabled
from zfswap.core.errors import ExternalToolFailure
from zfswap.core.logger import get_logger

logger = get_logger(__name__)


class ContainerLifecycle:
    """Manages LXC container start through pct."""

    def __init__(self, mock: bool = False):
        self.mock = mock or mock_enabled()

    def start_container(self, vmid: str) -> None:
        """Start a container.

        A container that is already running counts as started.

        Args:
            vmid: Container ID to start

        Raises:
            ExternalToolFailure: If pct start fails for any other reason
        """
        if self.mock:
            logger.info(f"MOCK: Would start container {vmid}")
            return

        logger.info(f"Starting container {vmid}")
        try:
            run_command(['pct', 'start', str(vmid)], f"start container {vmid}")
        except ExternalToolFailure as e:
            if 'already running' in e.stderr.lower():
                logger.info(f"Container {vmid} already running")
                return
            raise
        logger.info(f"✓ Container {vmid} started")

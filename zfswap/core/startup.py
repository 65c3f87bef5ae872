"""Encrypted backup volume startup: unlock, import, mount, start container."""
from zfswap.core.config import StartupConfig
from zfswap.core.errors import ConfigError, ZfswapError
from zfswap.core.logger import get_logger
from zfswap.core.zfs_manager import ZFSManager
from zfswap.services.luks import EncryptedVolume
from zfswap.services.proxmox import ContainerLifecycle

logger = get_logger(__name__)


class StartupSequence:
    """Brings up a container whose storage lives on a LUKS-encrypted pool.

    Steps run in order and the first failure aborts the sequence.
    """

    def __init__(
        self,
        config: StartupConfig,
        zfs: ZFSManager = None,
        volume: EncryptedVolume = None,
        containers: ContainerLifecycle = None,
        mock: bool = False,
    ):
        missing = config.missing()
        if missing:
            raise ConfigError(f"Missing startup settings: {', '.join(missing)}")

        self.config = config
        self.zfs = zfs or ZFSManager(mock=mock)
        self.volume = volume or EncryptedVolume(
            config.device, config.luks_name, config.key_file, mock=mock
        )
        self.containers = containers or ContainerLifecycle(mock=mock)

    def run(self) -> None:
        logger.info("Starting script...")

        self._step(
            "Opening LUKS-encrypted volume...",
            self.volume.open,
            "LUKS volume opened successfully.",
            "Failed to open LUKS volume. Exiting.",
        )
        self._step(
            "Importing ZFS pool...",
            lambda: self.zfs.import_pool(self.config.pool),
            "ZFS pool imported successfully.",
            "Failed to import ZFS pool. Exiting.",
        )
        self._step(
            "Mounting ZFS filesystem...",
            lambda: self.zfs.mount_filesystem(self.config.filesystem),
            "ZFS filesystem mounted successfully.",
            "Failed to mount ZFS filesystem. Exiting.",
        )
        self._step(
            "Starting the container...",
            lambda: self.containers.start_container(self.config.container),
            "Container started successfully.",
            "Failed to start container. Exiting.",
        )

        logger.info("Script completed successfully.")

    @staticmethod
    def _step(announce: str, action, success: str, failure: str) -> None:
        logger.info(announce)
        try:
            action()
        except ZfswapError:
            logger.error(failure)
            raise
        logger.info(success)

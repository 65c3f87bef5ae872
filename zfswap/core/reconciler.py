"""Swap dataset reconciliation."""
from __future__ import annotations

from zfswap.core.config import DEFAULT_MOUNTPOINT, DatasetAttributes
from zfswap.core.errors import ExistsWithWrongMountpoint
from zfswap.core.logger import get_logger
from zfswap.core.zfs_manager import ZFSManager

logger = get_logger(__name__)


class DatasetReconciler:
    """Ensure the swap dataset exists under a pool with the fixed mountpoint."""

    def __init__(self, zfs: ZFSManager, mountpoint: str = DEFAULT_MOUNTPOINT):
        self.zfs = zfs
        self.mountpoint = mountpoint

    def ensure_dataset(
        self,
        pool: str,
        name: str,
        attributes: DatasetAttributes | None = None,
        create: bool = True,
    ) -> None:
        """Create ``pool/name`` if absent, otherwise validate its mountpoint.

        With ``create`` off nothing is probed or created; the caller's mount
        check is what stops a run against a missing dataset.

        Raises:
            ExistsWithWrongMountpoint: If the dataset exists elsewhere
            ExternalToolFailure: If zfs create/get fails
        """
        dataset = f"{pool}/{name}"
        if not create:
            logger.debug(f"Dataset creation not requested, leaving {dataset} as is")
            return

        if self.zfs.dataset_exists(dataset):
            logger.info(f"ZFS dataset {dataset} already exists.")
            actual = self.zfs.get_property(dataset, "mountpoint")
            if actual != self.mountpoint:
                logger.error(f"Dataset {dataset} is mounted at {actual}, expected {self.mountpoint}")
                raise ExistsWithWrongMountpoint(dataset, actual, self.mountpoint)
            return

        attributes = attributes or DatasetAttributes()
        properties = {"mountpoint": self.mountpoint}
        properties.update(attributes.to_properties())

        logger.info(f"Creating ZFS dataset {dataset}")
        self.zfs.create_dataset(dataset, properties)
        logger.info(f"ZFS dataset {dataset} created.")

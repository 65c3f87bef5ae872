"""Pool orchestration for multi-pool swap provisioning."""
from dataclasses import dataclass
from typing import List, Optional

from zfswap.core.config import SwapConfig
from zfswap.core.logger import get_logger
from zfswap.core.loop_devices import LoopDevice, LoopDeviceAllocator
from zfswap.core.reconciler import DatasetReconciler
from zfswap.core.swap import MountInspector, SwapActivator
from zfswap.core.zfs_manager import ZFSManager

logger = get_logger(__name__)


@dataclass
class PoolResult:
    """Outcome of provisioning one pool."""

    pool: str
    dataset: str
    device: Optional[LoopDevice] = None
    skipped: bool = False


class SwapProvisioner:
    """Runs dataset reconciliation and swap activation for each pool in turn."""

    def __init__(
        self,
        config: SwapConfig,
        reconciler: DatasetReconciler,
        activator: SwapActivator,
    ):
        """Initialize the provisioner.

        Args:
            config: Effective swap configuration
            reconciler: Dataset reconciler bound to config.mountpoint
            activator: Swap activator
        """
        self.config = config
        self.reconciler = reconciler
        self.activator = activator

    @classmethod
    def from_config(cls, config: SwapConfig, mock: bool = False) -> "SwapProvisioner":
        """Wire up the default collaborators for ``config``."""
        zfs = ZFSManager(mock=mock)
        allocator = LoopDeviceAllocator(max_index=config.max_loop_index, mock=mock)
        activator = SwapActivator(allocator, MountInspector(mock=mock), mock=mock)
        return cls(config, DatasetReconciler(zfs, config.mountpoint), activator)

    def provision_pool(self, pool: str) -> PoolResult:
        """Reconcile the dataset on ``pool`` and (re)activate its swap file."""
        dataset = f"{pool}/{self.config.dataset}"
        logger.info(f"Processing ZFS pool: {pool}")

        if self.config.keep_existing and self.activator.swapfile_exists(self.config.mountpoint):
            logger.info(f"{self.config.swapfile} already exists, skipping {pool}")
            return PoolResult(pool=pool, dataset=dataset, skipped=True)

        self.reconciler.ensure_dataset(
            pool,
            self.config.dataset,
            self.config.attributes,
            create=self.config.create,
        )
        device = self.activator.activate_swap(self.config.mountpoint, self.config.size)
        return PoolResult(pool=pool, dataset=dataset, device=device)

    def run(self, pools: Optional[List[str]] = None) -> List[PoolResult]:
        """Provision every pool in order, stopping at the first failure.

        Duplicate pool names are processed once per occurrence.
        """
        pools = self.config.pools if pools is None else pools
        return [self.provision_pool(pool) for pool in pools]

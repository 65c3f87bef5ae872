"""ZFS dataset and pool management."""
from typing import Dict, Optional

from zfswap.core.commands import command_succeeds, run_command
from zfswap.core.config import mock_enabled
from zfswap.core.logger import get_logger

logger = get_logger(__name__)


class ZFSManager:
    """Manages ZFS datasets, properties and pool imports."""

    def __init__(self, mock: bool = False):
        self.mock = mock or mock_enabled()
        self._mock_datasets: Dict[str, Dict[str, str]] = {}  # Track datasets in mock mode

    def dataset_exists(self, dataset: str) -> bool:
        """Check if a dataset exists.

        Args:
            dataset: Full dataset name (e.g., 'tank/swap')

        Returns:
            True if dataset exists, False otherwise
        """
        if self.mock:
            return dataset in self._mock_datasets

        return command_succeeds(["zfs", "list", "-H", "-o", "name", dataset])

    def create_dataset(self, name: str, properties: Dict[str, str]) -> None:
        """Create a ZFS dataset with the given properties.

        Property values are passed to ``zfs create -o`` verbatim; invalid
        values surface as zfs's own error.

        Args:
            name: Full dataset name (e.g., 'tank/swap')
            properties: Dict of ZFS properties to set

        Raises:
            ExternalToolFailure: If zfs create fails
        """
        if self.mock:
            logger.info(f"MOCK: Would create dataset {name} with properties {properties}")
            self._mock_datasets[name] = dict(properties)
            return

        cmd = ["zfs", "create"]
        for key, value in properties.items():
            cmd.extend(["-o", f"{key}={value}"])
        cmd.append(name)

        run_command(cmd, f"create dataset {name}")

    def get_property(self, dataset: str, key: str) -> Optional[str]:
        """Get a single property value of a dataset.

        Raises:
            ExternalToolFailure: If zfs get fails (e.g. dataset missing)
        """
        if self.mock:
            return self._mock_datasets.get(dataset, {}).get(key)

        result = run_command(
            ["zfs", "get", "-H", "-o", "value", key, dataset],
            f"read {key} of {dataset}",
        )
        return result.stdout.strip()

    def import_pool(self, pool: str, force: bool = True) -> None:
        """Import a pool without mounting its datasets (zpool import -N)."""
        if self.mock:
            logger.info(f"MOCK: Would import pool {pool}")
            return

        cmd = ["zpool", "import", "-N", pool]
        if force:
            cmd.append("-f")
        run_command(cmd, f"import pool {pool}")

    def mount_filesystem(self, filesystem: str) -> None:
        """Mount a single ZFS filesystem."""
        if self.mock:
            logger.info(f"MOCK: Would mount {filesystem}")
            return

        run_command(["zfs", "mount", filesystem], f"mount {filesystem}")

"""Tests for swap dataset reconciliation."""
import pytest

from zfswap.core.config import DatasetAttributes
from zfswap.core.errors import ExistsWithWrongMountpoint, ExternalToolFailure
from zfswap.core.reconciler import DatasetReconciler
from zfswap.core.zfs_manager import ZFSManager


@pytest.fixture
def reconciler(fake_system):
    return DatasetReconciler(ZFSManager(), mountpoint="/swap")


class TestEnsureDataset:
    """Test dataset creation and validation."""

    def test_creates_missing_dataset_with_defaults(self, reconciler, fake_system):
        reconciler.ensure_dataset("alpha", "swap", create=True)

        assert fake_system.datasets["alpha/swap"] == {
            'mountpoint': '/swap',
            'dedup': 'off',
            'compression': 'zle',
            'logbias': 'throughput',
            'atime': 'off',
            'relatime': 'off',
            'recordsize': '8k',
            'com.sun:auto-snapshot': 'false',
            'checksum': 'fletcher4',
            'primarycache': 'none',
            'secondarycache': 'none',
            'sync': 'always',
        }

    def test_create_command_shape(self, reconciler, fake_system):
        """zfs create gets one -o per property and the dataset last."""
        reconciler.ensure_dataset("alpha", "swap", create=True)

        create = fake_system.commands("zfs")[-1]
        assert create[:4] == ["zfs", "create", "-o", "mountpoint=/swap"]
        assert create[-1] == "alpha/swap"
        assert create.count("-o") == 12

    def test_attribute_overrides_passed_verbatim(self, reconciler, fake_system):
        attributes = DatasetAttributes().with_overrides({'compression': 'lz4', 'recordsize': 'bogus'})

        reconciler.ensure_dataset("alpha", "swap", attributes, create=True)

        assert fake_system.datasets["alpha/swap"]['compression'] == 'lz4'
        assert fake_system.datasets["alpha/swap"]['recordsize'] == 'bogus'

    def test_idempotent(self, reconciler, fake_system):
        """A second call finds the dataset and does not create again."""
        reconciler.ensure_dataset("alpha", "swap", create=True)
        reconciler.ensure_dataset("alpha", "swap", create=True)

        creates = [cmd for cmd in fake_system.commands("zfs") if cmd[1] == "create"]
        assert len(creates) == 1
        assert fake_system.datasets["alpha/swap"]['mountpoint'] == '/swap'

    def test_existing_dataset_wrong_mountpoint(self, reconciler, fake_system):
        fake_system.datasets["alpha/swap"] = {'mountpoint': '/mnt/elsewhere'}

        with pytest.raises(ExistsWithWrongMountpoint) as exc_info:
            reconciler.ensure_dataset("alpha", "swap", create=True)

        assert exc_info.value.actual == '/mnt/elsewhere'
        assert exc_info.value.expected == '/swap'
        assert not [cmd for cmd in fake_system.commands("zfs") if cmd[1] == "create"]

    def test_existing_dataset_right_mountpoint(self, reconciler, fake_system):
        fake_system.datasets["alpha/swap"] = {'mountpoint': '/swap', 'compression': 'lz4'}

        reconciler.ensure_dataset("alpha", "swap", create=True)

        # Existing attributes are left alone
        assert fake_system.datasets["alpha/swap"]['compression'] == 'lz4'

    def test_create_disabled_is_noop(self, reconciler, fake_system):
        """Without create nothing is probed or created."""
        fake_system.datasets["alpha/swap"] = {'mountpoint': '/mnt/elsewhere'}

        reconciler.ensure_dataset("alpha", "swap", create=False)

        assert fake_system.calls == []

    def test_zfs_failure_surfaces(self, reconciler, fake_system):
        fake_system.fail_on("zfs", "create", stderr="cannot create 'alpha/swap': invalid property")

        with pytest.raises(ExternalToolFailure) as exc_info:
            reconciler.ensure_dataset("alpha", "swap", create=True)

        assert "create dataset alpha/swap" in str(exc_info.value)
        assert "invalid property" in str(exc_info.value)

    def test_mock_mode(self, fake_system):
        reconciler = DatasetReconciler(ZFSManager(mock=True), mountpoint="/swap")

        reconciler.ensure_dataset("alpha", "swap", create=True)
        reconciler.ensure_dataset("alpha", "swap", create=True)

        assert fake_system.calls == []

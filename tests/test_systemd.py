"""Tests for the systemd unit renderer."""
import pytest

from zfswap.core.config import DatasetAttributes, SwapConfig
from zfswap.core.errors import ConfigError
from zfswap.services.systemd import install_unit, render_unit, swap_command_args


class TestRenderUnit:

    def test_minimal_unit(self):
        config = SwapConfig(pools=["alpha", "beta"], dataset="swap", size="7G", create=True)

        text = render_unit(config)

        assert "Type=oneshot" in text
        assert "After=zfs-mount.service" in text
        assert "WantedBy=multi-user.target" in text
        assert "ExecStart=/usr/local/bin/zfswap swap -z alpha,beta -d swap -s 7G -c\n" in text

    def test_non_default_attributes_included(self):
        config = SwapConfig(
            pools=["alpha"],
            dataset="swap",
            size="4G",
            mountpoint="/swap2",
            attributes=DatasetAttributes(compression="lz4", auto_snapshot="true"),
        )

        args = swap_command_args(config)

        assert args[:7] == ["swap", "-z", "alpha", "-d", "swap", "-s", "4G"]
        assert args[args.index("--mountpoint") + 1] == "/swap2"
        assert "-c" not in args
        assert args[args.index("--compression") + 1] == "lz4"
        assert args[args.index("--auto-snapshot") + 1] == "true"
        assert "--dedup" not in args

    def test_quotes_arguments(self):
        config = SwapConfig(pools=["alpha"], dataset="swap", size="4G", mountpoint="/mnt/my swap")

        assert "--mountpoint '/mnt/my swap'" in render_unit(config)

    def test_requires_pools_dataset_size(self):
        with pytest.raises(ConfigError):
            render_unit(SwapConfig(pools=["alpha"], dataset="swap"))


class TestInstallUnit:

    def test_writes_and_enables(self, tmp_path, fake_system):
        path = install_unit("[Unit]\n", unit_dir=tmp_path)

        assert path == tmp_path / "zfswap.service"
        assert path.read_text() == "[Unit]\n"
        assert fake_system.calls == [
            ["systemctl", "daemon-reload"],
            ["systemctl", "enable", "zfswap.service"],
        ]

    def test_mock_mode(self, tmp_path, fake_system):
        path = install_unit("[Unit]\n", unit_dir=tmp_path, mock=True)

        assert not path.exists()
        assert fake_system.calls == []

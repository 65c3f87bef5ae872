"""Shared test fixtures for zfswap tests."""
import subprocess
from typing import Dict, List, Set

import pytest


class FakeSystem:
    """In-memory stand-in for zfs, losetup, mountpoint, mkswap and friends.

    Replaces subprocess.run; every command is recorded in ``calls``.
    """

    def __init__(self):
        self.datasets: Dict[str, Dict[str, str]] = {}
        self.mounted: Set[str] = set()
        self.bound: Dict[int, str] = {}
        self.formatted: List[str] = []
        self.swapped_on: List[str] = []
        self.calls: List[List[str]] = []
        self._failures = []

    def fail_on(self, *prefix: str, returncode: int = 1, stderr: str = "boom") -> None:
        """Make every command starting with ``prefix`` exit non-zero."""
        self._failures.append((list(prefix), returncode, stderr))

    def commands(self, tool: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if cmd[0] == tool]

    def __call__(self, cmd, capture_output=False, text=False, check=False, **kwargs):
        cmd = [str(part) for part in cmd]
        self.calls.append(cmd)
        returncode, stdout, stderr = self._dispatch(cmd)
        if check and returncode != 0:
            raise subprocess.CalledProcessError(returncode, cmd, output=stdout, stderr=stderr)
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    def _dispatch(self, cmd):
        for prefix, returncode, stderr in self._failures:
            if cmd[:len(prefix)] == prefix:
                return returncode, "", stderr

        tool = cmd[0]
        if tool == "zfs":
            return self._zfs(cmd)
        if tool == "mountpoint":
            return (0, "", "") if cmd[-1] in self.mounted else (32, "", "")
        if tool == "losetup":
            index = int(cmd[1].replace("/dev/loop", ""))
            if len(cmd) == 2:
                return (0, f"{cmd[1]}: []: ({self.bound[index]})\n", "") if index in self.bound else (1, "", "")
            self.bound[index] = cmd[2]
            return 0, "", ""
        if tool == "mkswap":
            self.formatted.append(cmd[1])
            return 0, "", ""
        if tool == "swapon":
            self.swapped_on.append(cmd[1])
            return 0, "", ""
        return 0, "", ""

    def _zfs(self, cmd):
        action = cmd[1]
        if action == "list":
            name = cmd[-1]
            if name in self.datasets:
                return 0, f"{name}\n", ""
            return 1, "", f"cannot open '{name}': dataset does not exist"
        if action == "create":
            name = cmd[-1]
            if name in self.datasets:
                return 1, "", f"cannot create '{name}': dataset already exists"
            options = cmd[2:-1]
            properties = dict(
                option.split("=", 1) for flag, option in zip(options[::2], options[1::2])
            )
            self.datasets[name] = properties
            return 0, "", ""
        if action == "get":
            key, name = cmd[-2], cmd[-1]
            if name not in self.datasets:
                return 1, "", f"cannot open '{name}': dataset does not exist"
            return 0, f"{self.datasets[name].get(key, '-')}\n", ""
        return 0, "", ""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep host config and mock settings out of tests."""
    monkeypatch.delenv("ZFSWAP_MOCK", raising=False)
    monkeypatch.delenv("ZFSWAP_CONFIG", raising=False)
    monkeypatch.delenv("ZFSWAP_MOUNTPOINT", raising=False)
    monkeypatch.delenv("ZFSWAP_MAX_LOOP_INDEX", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_system(monkeypatch):
    """Route all external commands through a FakeSystem."""
    system = FakeSystem()
    monkeypatch.setattr("zfswap.core.commands.subprocess.run", system)
    return system


@pytest.fixture
def mount_dir(tmp_path, fake_system):
    """A directory the fake mount inspector reports as mounted."""
    path = tmp_path / "swap"
    path.mkdir()
    fake_system.mounted.add(str(path))
    return path


@pytest.fixture
def sparse_fallocate(monkeypatch):
    """Allocate files sparsely so multi-GiB sizes stay cheap in tests."""
    import os

    def fake_fallocate(fd, offset, length):
        os.ftruncate(fd, offset + length)

    monkeypatch.setattr("zfswap.core.swap.os.posix_fallocate", fake_fallocate)

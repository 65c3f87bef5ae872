"""zfswap runtime configuration and settings."""
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from zfswap.core.errors import ConfigError

# Default config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./zfswap.yml",
    "/etc/zfswap/zfswap.yml",
]

DEFAULT_MOUNTPOINT = "/swap"
SWAPFILE_NAME = "swapfile"
MAX_LOOP_INDEX = 255

MOCK_ENV_VALUES = ("1", "true", "yes")


def mock_enabled() -> bool:
    """Return True when ZFSWAP_MOCK asks for a dry run."""
    return os.environ.get("ZFSWAP_MOCK", "").strip().lower() in MOCK_ENV_VALUES


@dataclass
class DatasetAttributes:
    """ZFS properties applied when the swap dataset is created.

    The defaults keep ZFS from caching, compressing or snapshotting swap
    pages, which is what avoids the ZFS/swap memory deadlock.
    """

    dedup: str = "off"
    compression: str = "zle"
    logbias: str = "throughput"
    atime: str = "off"
    relatime: str = "off"
    recordsize: str = "8k"
    auto_snapshot: str = "false"
    checksum: str = "fletcher4"
    primarycache: str = "none"
    secondarycache: str = "none"
    sync: str = "always"

    # attribute name -> ZFS property name, where they differ
    PROPERTY_NAMES = {'auto_snapshot': 'com.sun:auto-snapshot'}

    def to_properties(self) -> Dict[str, str]:
        """Return the attributes as ZFS property name -> value, in a stable order."""
        return {
            self.PROPERTY_NAMES.get(f.name, f.name): getattr(self, f.name)
            for f in fields(self)
        }

    def with_overrides(self, overrides: Dict[str, Optional[str]]) -> "DatasetAttributes":
        """Return a copy with non-None overrides applied.

        Keys may be attribute names or ZFS property names
        ('auto_snapshot' and 'com.sun:auto-snapshot' are equivalent).
        """
        reverse = {v: k for k, v in self.PROPERTY_NAMES.items()}
        known = {f.name for f in fields(self)}
        values = {f.name: getattr(self, f.name) for f in fields(self)}

        for key, value in overrides.items():
            if value is None:
                continue
            name = reverse.get(key, key.replace('-', '_'))
            if name not in known:
                raise ConfigError(f"Unknown dataset attribute '{key}'")
            values[name] = str(value)

        return DatasetAttributes(**values)


@dataclass
class StartupConfig:
    """Settings for the encrypted volume startup sequence."""

    key_file: Optional[str] = None
    luks_name: Optional[str] = None
    device: Optional[str] = None
    pool: Optional[str] = None
    filesystem: Optional[str] = None
    container: Optional[str] = None

    def missing(self) -> List[str]:
        """Names of settings that are still unset."""
        return [f.name for f in fields(self) if not getattr(self, f.name)]


@dataclass
class SwapConfig:
    """Runtime configuration for swap provisioning.

    Attributes:
        pools: ZFS pools to provision, in processing order
        dataset: Dataset name created under each pool
        size: Swap file size string (e.g. '7G')
        create: Create the dataset when it does not exist
        mountpoint: Fixed mountpoint every swap dataset must use
        keep_existing: Skip a pool whose swap file is already present
        max_loop_index: Highest loop device index to consider
        attributes: ZFS properties for newly created datasets
        startup: Encrypted volume startup settings
    """

    pools: List[str] = field(default_factory=list)
    dataset: Optional[str] = None
    size: Optional[str] = None
    create: bool = False
    mountpoint: str = DEFAULT_MOUNTPOINT
    keep_existing: bool = False
    max_loop_index: int = MAX_LOOP_INDEX
    attributes: DatasetAttributes = field(default_factory=DatasetAttributes)
    startup: StartupConfig = field(default_factory=StartupConfig)

    @property
    def swapfile(self) -> Path:
        """Path of the swap file under the fixed mountpoint."""
        return Path(self.mountpoint) / SWAPFILE_NAME

    @classmethod
    def from_env(cls) -> "SwapConfig":
        """Create config from environment variables.

        Environment variables:
            ZFSWAP_MOUNTPOINT: Fixed swap dataset mountpoint
            ZFSWAP_MAX_LOOP_INDEX: Highest loop device index to probe

        Returns:
            SwapConfig instance with values from environment or defaults
        """
        return cls(
            mountpoint=os.getenv("ZFSWAP_MOUNTPOINT", DEFAULT_MOUNTPOINT),
            max_loop_index=_loop_index(
                os.getenv("ZFSWAP_MAX_LOOP_INDEX", MAX_LOOP_INDEX), "ZFSWAP_MAX_LOOP_INDEX"
            ),
        )

    @classmethod
    def from_file(cls, path: str, base: Optional["SwapConfig"] = None) -> "SwapConfig":
        """Load a YAML config file on top of ``base`` (defaults to from_env())."""
        config_path = Path(path)
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        config = base if base is not None else cls.from_env()
        if not raw:
            return config
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        return config.merged(raw, source=str(config_path))

    def merged(self, raw: Dict[str, Any], source: str = "config") -> "SwapConfig":
        """Return a copy with values from a parsed config mapping applied."""
        unknown = set(raw) - {
            'pools', 'dataset', 'size', 'create', 'mountpoint',
            'keep_existing', 'max_loop_index', 'attributes', 'startup',
        }
        if unknown:
            raise ConfigError(f"Unknown keys in {source}: {', '.join(sorted(unknown))}")

        pools = raw.get('pools', self.pools)
        if isinstance(pools, str):
            pools = split_pools(pools)
        elif not isinstance(pools, list):
            raise ConfigError(f"'pools' in {source} must be a list or comma-separated string")

        attributes = raw.get('attributes') or {}
        if not isinstance(attributes, dict):
            raise ConfigError(f"'attributes' in {source} must be a mapping")

        startup_raw = raw.get('startup') or {}
        if not isinstance(startup_raw, dict):
            raise ConfigError(f"'startup' in {source} must be a mapping")
        startup_keys = {f.name for f in fields(StartupConfig)}
        unknown_startup = set(startup_raw) - startup_keys
        if unknown_startup:
            raise ConfigError(
                f"Unknown startup keys in {source}: {', '.join(sorted(unknown_startup))}"
            )
        startup_values = {f.name: getattr(self.startup, f.name) for f in fields(StartupConfig)}
        startup_values.update({k: str(v) for k, v in startup_raw.items() if v is not None})

        return SwapConfig(
            pools=[str(p) for p in pools],
            dataset=raw.get('dataset', self.dataset),
            size=str(raw['size']) if raw.get('size') is not None else self.size,
            create=_flag(raw.get('create', self.create), f"'create' in {source}"),
            mountpoint=str(raw.get('mountpoint', self.mountpoint)),
            keep_existing=_flag(
                raw.get('keep_existing', self.keep_existing), f"'keep_existing' in {source}"
            ),
            max_loop_index=_loop_index(
                raw.get('max_loop_index', self.max_loop_index), f"'max_loop_index' in {source}"
            ),
            attributes=self.attributes.with_overrides(attributes),
            startup=StartupConfig(**startup_values),
        )


def split_pools(value: str) -> List[str]:
    """Split a comma-separated pool list, dropping empty entries."""
    return [p.strip() for p in value.split(',') if p.strip()]


def _flag(value: Any, name: str) -> bool:
    """Read a boolean setting; quoted YAML strings like "false" count as False."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'on'):
        return True
    if text in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigError(f"{name} must be true or false, got '{value}'")


def _loop_index(value: Any, name: str) -> int:
    """Read the highest loop device index; must stay within /dev/loop0..255."""
    try:
        index = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer") from e
    if not 0 <= index <= MAX_LOOP_INDEX:
        raise ConfigError(f"{name} must be between 0 and {MAX_LOOP_INDEX}, got {index}")
    return index


def find_config(config_path: Optional[str] = None) -> Optional[str]:
    """Locate the active zfswap configuration file, if any."""
    if config_path:
        return config_path

    if env_config := os.environ.get("ZFSWAP_CONFIG"):
        return env_config

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return path

    return None


def load_config(config_path: Optional[str] = None) -> SwapConfig:
    """Build the effective config: defaults, environment, then config file."""
    config = SwapConfig.from_env()
    path = find_config(config_path)
    if path is None:
        return config
    return SwapConfig.from_file(path, base=config)

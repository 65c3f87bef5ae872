"""Size string parsing (fallocate-style: 7G, 512M, 4GiB, 1GB)."""
import re

from zfswap.core.errors import ConfigError

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([KMGTPE]?)(iB|B)?\s*$", re.IGNORECASE)
_EXPONENTS = {'': 0, 'K': 1, 'M': 2, 'G': 3, 'T': 4, 'P': 5, 'E': 6}


def parse_size(value: str) -> int:
    """Convert a size string to bytes.

    K/M/G/T/P/E and KiB/MiB/... are powers of 1024, KB/MB/... are powers
    of 1000. A bare number is a byte count.

    Raises:
        ConfigError: If the string is not a valid, positive size
    """
    match = _SIZE_PATTERN.match(str(value))
    if not match:
        raise ConfigError(f"Invalid size '{value}' (expected e.g. 512M, 7G, 4GiB)")

    number, unit, suffix = match.groups()
    unit = unit.upper()
    if suffix and not unit:
        # '100B' means 100 bytes, '100iB' is nonsense
        if suffix.lower() != 'b':
            raise ConfigError(f"Invalid size '{value}'")
        suffix = None

    base = 1000 if suffix and suffix.lower() == 'b' else 1024
    size = int(number) * base ** _EXPONENTS[unit]
    if size <= 0:
        raise ConfigError(f"Size must be greater than zero, got '{value}'")
    return size


def format_size(size: int) -> str:
    """Render a byte count with the largest exact binary unit (4294967296 -> 4G)."""
    units = ['', 'K', 'M', 'G', 'T', 'P', 'E']
    unit_index = 0
    while size and size % 1024 == 0 and unit_index < len(units) - 1:
        size //= 1024
        unit_index += 1
    return f"{size}{units[unit_index]}"

"""Unified logging for zfswap with console, file and syslog output."""
import logging
import logging.handlers
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console()

# Log file configuration
LOG_DIR = Path("/var/log/zfswap")
LOG_FILE = LOG_DIR / "zfswap.log"
FALLBACK_LOG_FILE = Path("/tmp/zfswap.log")
SYSLOG_SOCKET = "/dev/log"

# Track which sinks have been set up
_file_logging_configured = False
_syslog_configured = False


def setup_file_logging(log_file: str = None, verbose: bool = False):
    """Set up file logging for zfswap operations.

    Args:
        log_file: Path to log file (defaults to /var/log/zfswap/zfswap.log)
        verbose: Enable debug-level logging

    Note:
        Creates log directory if it doesn't exist.
        Falls back to /tmp if /var/log/zfswap is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        target_log_file = FALLBACK_LOG_FILE
        target_log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger("zfswap")
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    file_formatter = logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    _file_logging_configured = True

    root_logger.info(f"zfswap logging initialized: {target_log_file}")


def setup_syslog(tag: str, address: str = SYSLOG_SOCKET) -> bool:
    """Forward zfswap log records to the local syslog daemon.

    Records are tagged the same way ``logger -t <tag>`` tags them, so
    existing journal filters keep working.

    Args:
        tag: Syslog identifier prepended to every message
        address: Path of the syslog socket

    Returns:
        True if the handler is installed, False if no syslog socket exists
    """
    global _syslog_configured

    if _syslog_configured:
        return True

    root_logger = logging.getLogger("zfswap")
    if not Path(address).exists():
        root_logger.warning(f"Syslog socket {address} not found, syslog output disabled")
        return False

    handler = logging.handlers.SysLogHandler(address=address)
    handler.setFormatter(logging.Formatter(f"{tag}: %(message)s"))
    root_logger.addHandler(handler)
    if root_logger.level == logging.NOTSET:
        root_logger.setLevel(logging.INFO)

    _syslog_configured = True
    return True


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance with console output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger with Rich console handler

    Note:
        File and syslog output must be enabled separately via
        setup_file_logging() and setup_syslog()
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger

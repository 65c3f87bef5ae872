"""LUKS encrypted volume handling."""
from zfswap.core.commands import run_command
from zfswap.core.config import mock_enabled
from zfswap.core.logger import get_logger

logger = get_logger(__name__)


class EncryptedVolume:
    """A LUKS device opened with a key file."""

    def __init__(self, device: str, name: str, key_file: str, mock: bool = False):
        self.device = device
        self.name = name
        self.key_file = key_file
        self.mock = mock or mock_enabled()

    def open(self) -> None:
        """Unlock the device as /dev/mapper/<name>.

        Raises:
            ExternalToolFailure: If cryptsetup fails
        """
        cmd = [
            "cryptsetup", "luksOpen", self.device, self.name,
            f"--key-file={self.key_file}",
        ]
        if self.mock:
            logger.info(f"MOCK: Would run {' '.join(cmd)}")
            return

        run_command(cmd, f"open LUKS volume {self.device}")

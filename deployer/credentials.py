"""
Credentials
Scoped holder for the mnemonic secret and the target network identifier
"""

from typing import Optional

from loguru import logger

from .constants import VALID_MNEMONIC_WORD_COUNTS
from .errors import ConfigurationError


class Credentials:
    """
    Mnemonic secret plus network identifier for one deployment

    The mnemonic lives in a mutable buffer that `wipe()` zeroes. Use the
    object as a context manager so the buffer is wiped on every exit path:

        with Credentials(mnemonic, 'sepolia') as credentials:
            await deploy(credentials, artifact)
    """

    def __init__(self, mnemonic: str, network: str, address_index: int = 0):
        """
        Initialize credentials

        Args:
            mnemonic: BIP-39 mnemonic phrase
            network: RPC URL, IPC path or symbolic network name
            address_index: HD account index to deploy from

        Raises:
            ConfigurationError: if any value is empty or malformed
        """
        if not isinstance(mnemonic, str) or not mnemonic.strip():
            raise ConfigurationError("Mnemonic secret must be a non-empty string")

        if not isinstance(network, str) or not network.strip():
            raise ConfigurationError("Network identifier must be a non-empty string")

        if isinstance(address_index, bool) or not isinstance(address_index, int) or address_index < 0:
            raise ConfigurationError(
                "Address index must be a non-negative integer",
                reason=repr(address_index)
            )

        words = mnemonic.split()
        if len(words) not in VALID_MNEMONIC_WORD_COUNTS:
            # Word count only, never the words themselves
            raise ConfigurationError(
                "Mnemonic has an invalid word count",
                reason=f"{len(words)} words"
            )

        self._secret = bytearray(' '.join(words).encode('utf-8'))
        self.network = network.strip()
        self.address_index = address_index
        self._wiped = False

    @property
    def wiped(self) -> bool:
        return self._wiped

    def reveal(self) -> str:
        """
        Return the mnemonic for key derivation

        Raises:
            ConfigurationError: if the secret was already wiped
        """
        if self._wiped:
            raise ConfigurationError("Credentials were already wiped")
        return self._secret.decode('utf-8')

    def wipe(self):
        """Zero the secret buffer. Safe to call more than once."""
        if self._wiped:
            return

        for i in range(len(self._secret)):
            self._secret[i] = 0
        self._secret = bytearray()
        self._wiped = True

        logger.debug("Credentials wiped")

    def __enter__(self) -> 'Credentials':
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.wipe()
        return None

    def __repr__(self) -> str:
        state = 'wiped' if self._wiped else 'set'
        return f"Credentials(mnemonic=<redacted:{state}>, network={self.network!r}, address_index={self.address_index})"

    __str__ = __repr__

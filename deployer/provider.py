"""
Credentialed Provider
HD wallet account derived from the mnemonic, bound to an RPC transport
"""

import os
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

from eth_account import Account
from loguru import logger
from web3 import Web3
from web3.providers import BaseProvider

from .constants import (
    DEFAULT_RPC_TIMEOUT,
    DERIVATION_PATH_PREFIX,
    NETWORK_ALIASES,
    NETWORKS,
)
from .credentials import Credentials
from .errors import ConfigurationError

Account.enable_unaudited_hdwallet_features()


class CredentialedProvider:
    """
    Signing + transport backend for one deployment

    Construction derives the account and prepares the RPC transport, but
    performs no network I/O. The private key never leaves this object:
    callers get the address and `sign_transaction`.
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Optional[BaseProvider] = None,
        rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    ):
        """
        Initialize provider

        Args:
            credentials: mnemonic + network identifier
            transport: pre-built web3 provider, overrides the network identifier's endpoint
            rpc_timeout: HTTP/IPC request timeout in seconds

        Raises:
            ConfigurationError: if the mnemonic or network identifier is invalid
        """
        self.network = credentials.network
        self.derivation_path = f"{DERIVATION_PATH_PREFIX}/{credentials.address_index}"

        network_config = resolve_network(credentials.network)
        self.network_name = network_config['name']
        self.endpoint = network_config['endpoint']
        self.expected_chain_id = network_config['chain_id']

        if transport is None:
            transport = build_transport(self.endpoint, rpc_timeout)
        self.transport = transport

        self._account = self._derive_account(credentials)
        self.address = self._account.address

        logger.info(
            f"Provider ready: {self.address} ({self.derivation_path}) "
            f"on {self.network_name} [{display_endpoint(self.endpoint)}]"
        )

    def _derive_account(self, credentials: Credentials):
        try:
            return Account.from_mnemonic(
                credentials.reveal(),
                account_path=self.derivation_path
            )
        except ConfigurationError:
            raise
        except Exception as e:
            # The library message may quote the phrase, so only the type is kept
            raise ConfigurationError(
                "Mnemonic could not be used to derive an account",
                reason=type(e).__name__
            ) from None

    @property
    def closed(self) -> bool:
        return self._account is None

    def sign_transaction(self, transaction: Dict):
        """
        Sign a transaction with the derived account

        Args:
            transaction: Transaction dict

        Returns:
            Signed transaction
        """
        if self._account is None:
            raise ConfigurationError("Provider is closed")

        try:
            return self._account.sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Error signing transaction: {type(e).__name__}")
            raise

    def close(self):
        """Release the signing key"""
        if self._account is not None:
            self._account = None
            logger.debug("Provider closed, signing key released")

    def __enter__(self) -> 'CredentialedProvider':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return None

    def __repr__(self) -> str:
        return f"CredentialedProvider(address={self.address!r}, network={self.network_name!r})"


def resolve_network(network: str) -> Dict:
    """
    Resolve a network identifier to an endpoint

    Args:
        network: http(s) URL, IPC socket path or symbolic name (e.g. 'sepolia')

    Returns:
        Dict with 'name', 'endpoint' and 'chain_id' (None when unknown)

    Raises:
        ConfigurationError: for unsupported schemes, unknown names or unset RPC URLs
    """
    identifier = network.strip()
    parsed = urlparse(identifier)

    if parsed.scheme in ('http', 'https'):
        if not parsed.netloc:
            raise ConfigurationError("Network URL has no host", reason=display_endpoint(identifier))
        return {'name': parsed.hostname, 'endpoint': identifier, 'chain_id': None}

    if parsed.scheme in ('ws', 'wss'):
        raise ConfigurationError("WebSocket endpoints are not supported, use an HTTP(S) URL")

    # single letters are Windows drive paths
    if len(parsed.scheme) > 1:
        raise ConfigurationError("Unsupported network URL scheme", reason=parsed.scheme)

    if identifier.endswith('.ipc') or os.sep in identifier:
        return {'name': Path(identifier).name, 'endpoint': identifier, 'chain_id': None}

    name = NETWORK_ALIASES.get(identifier.lower(), identifier.lower())
    config = NETWORKS.get(name)

    if config is None:
        raise ConfigurationError(
            "Unknown network",
            reason=f"{identifier} (known: {', '.join(sorted(NETWORKS))})"
        )

    endpoint = os.getenv(config['rpc_url_env']) or config['default_rpc_url']
    if not endpoint:
        raise ConfigurationError(
            f"{config['rpc_url_env']} must be set to deploy on {name}"
        )

    if urlparse(endpoint).scheme not in ('http', 'https') and not endpoint.endswith('.ipc'):
        raise ConfigurationError(
            f"{config['rpc_url_env']} must be an HTTP(S) URL or IPC path",
            reason=display_endpoint(endpoint)
        )

    return {'name': name, 'endpoint': endpoint, 'chain_id': config['chain_id']}


def build_transport(endpoint: str, rpc_timeout: float = DEFAULT_RPC_TIMEOUT) -> BaseProvider:
    """Create the web3 transport for an endpoint (no connection is made)"""
    if urlparse(endpoint).scheme in ('http', 'https'):
        return Web3.HTTPProvider(endpoint, request_kwargs={'timeout': rpc_timeout})
    return Web3.IPCProvider(endpoint, timeout=rpc_timeout)


def display_endpoint(endpoint: str) -> str:
    """Endpoint without path or query, which often carry API keys"""
    parsed = urlparse(endpoint)
    if parsed.scheme in ('http', 'https') and parsed.hostname:
        port = f":{parsed.port}" if parsed.port else ''
        return f"{parsed.scheme}://{parsed.hostname}{port}"
    return endpoint

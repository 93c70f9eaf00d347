"""
Network Client
Attaches a Web3 client to the credentialed provider and checks connectivity
"""

from web3 import Web3
from loguru import logger

from .errors import NetworkConnectionError
from .provider import CredentialedProvider, display_endpoint


def connect(provider: CredentialedProvider) -> Web3:
    """
    Attach a Web3 client using the provider's transport

    Args:
        provider: Credentialed provider

    Returns:
        Connected Web3 instance

    Raises:
        NetworkConnectionError: if the node is unreachable, or reports a
            different chain than the named network expects
    """
    endpoint = display_endpoint(provider.endpoint)
    w3 = Web3(provider.transport)

    try:
        connected = w3.is_connected()
    except OSError as e:
        raise NetworkConnectionError(f"Cannot reach {endpoint}", reason=str(e)) from e

    if not connected:
        logger.error(f"Failed to connect to {endpoint}")
        raise NetworkConnectionError(f"Failed to connect to {endpoint}")

    try:
        chain_id = w3.eth.chain_id
    except OSError as e:
        raise NetworkConnectionError(f"Lost connection to {endpoint}", reason=str(e)) from e
    except Exception as e:
        raise NetworkConnectionError(f"{endpoint} rejected the handshake", reason=str(e)) from e

    expected = provider.expected_chain_id
    if expected is not None and chain_id != expected:
        raise NetworkConnectionError(
            f"{endpoint} is not {provider.network_name}",
            reason=f"chain id {chain_id}, expected {expected}"
        )

    logger.info(f"Connected to {provider.network_name} (chain id {chain_id})")
    return w3

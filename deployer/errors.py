"""
Deployment Errors
Error taxonomy for the single deployment attempt
"""

from typing import Optional


class DeployError(Exception):
    """Base class for every failure of a deployment attempt"""

    stage = 'deploy'
    exit_code = 1

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def __str__(self) -> str:
        if self.reason:
            return f"[{self.stage}] {self.message}: {self.reason}"
        return f"[{self.stage}] {self.message}"


class ConfigurationError(DeployError):
    """Invalid or missing credentials, network id or settings. No I/O attempted."""

    stage = 'configuration'
    exit_code = 2


class ArtifactError(DeployError):
    """Compiled artifact is missing, unreadable or malformed"""

    stage = 'artifact'
    exit_code = 3


class NetworkConnectionError(DeployError):
    """Network unreachable or handshake rejected. No funds spent."""

    stage = 'connection'
    exit_code = 4


class TransactionError(DeployError):
    """
    Network reachable but the contract-creation transaction failed

    The transaction may have been mined and billed, so `tx_hash` is kept
    whenever the failure happened after submission.
    """

    stage = 'transaction'
    exit_code = 5

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        tx_hash: Optional[str] = None
    ):
        super().__init__(message, reason)
        self.tx_hash = tx_hash

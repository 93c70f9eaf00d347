"""
Contract Deployer Package
Credentialed provider, network client and one-shot contract deployment
"""

from .artifact import CompiledArtifact
from .credentials import Credentials
from .errors import (
    ArtifactError,
    ConfigurationError,
    DeployError,
    NetworkConnectionError,
    TransactionError,
)
from .orchestrator import DeploymentOrchestrator, DeploymentResult, deploy, deploy_sync
from .provider import CredentialedProvider

__all__ = [
    'CompiledArtifact',
    'Credentials',
    'CredentialedProvider',
    'DeploymentOrchestrator',
    'DeploymentResult',
    'deploy',
    'deploy_sync',
    'DeployError',
    'ConfigurationError',
    'ArtifactError',
    'NetworkConnectionError',
    'TransactionError',
]

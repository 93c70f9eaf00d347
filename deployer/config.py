"""
Deployment Settings
Reads the process configuration from environment variables
"""

import json
import os
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .constants import (
    DEFAULT_PRIORITY_FEE_GWEI,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_RPC_TIMEOUT,
)
from .errors import ConfigurationError

LOG_LEVELS = ('TRACE', 'DEBUG', 'INFO', 'SUCCESS', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class DeploySettings:
    """Everything one deployment run needs, except the secret"""

    network: str
    artifact_path: str
    contract_name: Optional[str] = None
    address_index: int = 0
    constructor_args: List[Any] = field(default_factory=list)
    gas_limit: Optional[int] = None
    priority_fee_gwei: float = DEFAULT_PRIORITY_FEE_GWEI
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    log_level: str = 'INFO'
    log_file: Optional[str] = None

    def orchestrator_options(self) -> dict:
        return {
            'gas_limit': self.gas_limit,
            'priority_fee_gwei': self.priority_fee_gwei,
            'receipt_timeout': self.receipt_timeout,
            'rpc_timeout': self.rpc_timeout,
        }


def load_settings(env: Optional[Mapping[str, str]] = None) -> DeploySettings:
    """
    Build settings from environment variables

    Args:
        env: mapping to read from (defaults to os.environ)

    Returns:
        DeploySettings

    Raises:
        ConfigurationError: if a required variable is missing or a value is malformed
    """
    env = os.environ if env is None else env

    missing = [name for name in ('DEPLOY_NETWORK', 'DEPLOY_ARTIFACT') if not env.get(name, '').strip()]
    if missing:
        raise ConfigurationError(f"Missing environment variables: {', '.join(missing)}")

    return DeploySettings(
        network=env['DEPLOY_NETWORK'].strip(),
        artifact_path=env['DEPLOY_ARTIFACT'].strip(),
        contract_name=env.get('DEPLOY_CONTRACT_NAME') or None,
        address_index=_parse_int(env, 'DEPLOY_ADDRESS_INDEX', 0, minimum=0),
        constructor_args=_parse_args(env.get('DEPLOY_CONSTRUCTOR_ARGS')),
        gas_limit=_parse_int(env, 'DEPLOY_GAS_LIMIT', None, minimum=21000),
        priority_fee_gwei=_parse_float(env, 'DEPLOY_PRIORITY_FEE_GWEI', DEFAULT_PRIORITY_FEE_GWEI),
        receipt_timeout=_parse_float(env, 'DEPLOY_RECEIPT_TIMEOUT', DEFAULT_RECEIPT_TIMEOUT),
        rpc_timeout=_parse_float(env, 'DEPLOY_RPC_TIMEOUT', DEFAULT_RPC_TIMEOUT),
        log_level=_parse_log_level(env.get('DEPLOY_LOG_LEVEL')),
        log_file=env.get('DEPLOY_LOG_FILE') or None
    )


def read_mnemonic(env: Optional[Mapping[str, str]] = None) -> str:
    """Read DEPLOY_MNEMONIC. Kept apart from DeploySettings so it is never logged with them."""
    env = os.environ if env is None else env
    mnemonic = env.get('DEPLOY_MNEMONIC', '')

    if not mnemonic.strip():
        raise ConfigurationError("DEPLOY_MNEMONIC must be set")

    return mnemonic


def _parse_int(env: Mapping[str, str], name: str, default: Optional[int], minimum: int = 0) -> Optional[int]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", reason=raw) from None

    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}", reason=raw)

    return value


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = float(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number", reason=raw) from None

    if value <= 0:
        raise ConfigurationError(f"{name} must be positive", reason=raw)

    return value


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or 'INFO').strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigurationError("DEPLOY_LOG_LEVEL is not a log level", reason=raw)
    return level


def _parse_args(raw: Optional[str]) -> List[Any]:
    if raw is None or not raw.strip():
        return []

    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError("DEPLOY_CONSTRUCTOR_ARGS must be a JSON array", reason=str(e)) from e

    if not isinstance(args, list):
        raise ConfigurationError("DEPLOY_CONSTRUCTOR_ARGS must be a JSON array", reason=type(args).__name__)

    return args

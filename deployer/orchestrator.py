"""
Deployment Orchestrator
Provider setup -> connection -> single contract-creation transaction
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from loguru import logger
from web3 import Web3
from web3.exceptions import TimeExhausted
from web3.providers import BaseProvider

from .artifact import CompiledArtifact
from .client import connect
from .constants import (
    DEFAULT_PRIORITY_FEE_GWEI,
    DEFAULT_RECEIPT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_RPC_TIMEOUT,
    GAS_ESTIMATE_BUFFER,
    ZERO_ADDRESS,
)
from .credentials import Credentials
from .errors import ArtifactError, ConfigurationError, NetworkConnectionError, TransactionError
from .provider import CredentialedProvider, display_endpoint


@dataclass(frozen=True)
class DeploymentResult:
    """Confirmed contract deployment"""

    contract_address: str
    transaction_hash: str
    block_number: int
    gas_used: int
    deployer: str
    network: str


class DeploymentOrchestrator:
    """
    Runs one deployment attempt

    No retries: a failed attempt is terminal and surfaces as a DeployError
    subclass, since resubmitting could deploy twice.
    """

    def __init__(
        self,
        gas_limit: Optional[int] = None,
        priority_fee_gwei: float = DEFAULT_PRIORITY_FEE_GWEI,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL,
        rpc_timeout: float = DEFAULT_RPC_TIMEOUT,
        transport: Optional[BaseProvider] = None
    ):
        """
        Initialize orchestrator

        Args:
            gas_limit: fixed gas limit (None = estimate with a 20% buffer)
            priority_fee_gwei: EIP-1559 tip
            receipt_timeout: seconds to wait for inclusion
            poll_interval: seconds between receipt polls
            rpc_timeout: transport request timeout
            transport: pre-built web3 provider replacing the credentials' endpoint
        """
        if gas_limit is not None and gas_limit <= 0:
            raise ConfigurationError("Gas limit must be positive", reason=str(gas_limit))

        self.gas_limit = gas_limit
        self.priority_fee_gwei = priority_fee_gwei
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval
        self.rpc_timeout = rpc_timeout
        self.transport = transport

    async def deploy(
        self,
        credentials: Credentials,
        artifact: CompiledArtifact,
        constructor_args: Sequence[Any] = ()
    ) -> DeploymentResult:
        """
        Deploy the artifact with the given credentials

        Args:
            credentials: mnemonic + network identifier (wiping them stays with the caller)
            artifact: compiled interface + bytecode
            constructor_args: constructor arguments in ABI order

        Returns:
            DeploymentResult for the confirmed contract

        Raises:
            ConfigurationError: bad credentials, before any I/O
            ArtifactError: bad artifact or constructor arguments, before any I/O
            NetworkConnectionError: network unreachable, nothing submitted
            TransactionError: transaction rejected, reverted or unconfirmed
        """
        self._check_credentials(credentials)
        data = self._creation_data(artifact, constructor_args)

        name = artifact.contract_name or 'contract'
        logger.info(f"Deploying {name} ({artifact.size} bytes) to {display_endpoint(credentials.network)}")

        with CredentialedProvider(credentials, self.transport, self.rpc_timeout) as provider:
            w3 = connect(provider)
            transaction = self._build_transaction(w3, provider, data)
            tx_hash = self._submit(w3, provider, transaction)
            receipt = await self._wait_for_receipt(w3, tx_hash)

            contract_address = receipt.get('contractAddress')
            if not contract_address or int(contract_address, 16) == int(ZERO_ADDRESS, 16):
                raise TransactionError(
                    "Receipt carries no contract address",
                    tx_hash=tx_hash
                )

            result = DeploymentResult(
                contract_address=Web3.to_checksum_address(contract_address),
                transaction_hash=tx_hash,
                block_number=receipt['blockNumber'],
                gas_used=receipt['gasUsed'],
                deployer=provider.address,
                network=provider.network_name
            )

        logger.success(f"Contract deployed at {result.contract_address}")
        logger.info(f"Block {result.block_number}, gas used {result.gas_used}")
        return result

    def _check_credentials(self, credentials: Credentials):
        if not isinstance(credentials, Credentials):
            raise ConfigurationError(
                "Credentials are required",
                reason=type(credentials).__name__
            )
        if credentials.wiped:
            raise ConfigurationError("Credentials were already wiped")

    def _creation_data(self, artifact: CompiledArtifact, constructor_args: Sequence[Any]) -> str:
        if not isinstance(artifact, CompiledArtifact):
            raise ArtifactError("A compiled artifact is required", reason=type(artifact).__name__)

        # Re-validate: the dataclass can be built directly, bypassing create()
        checked = CompiledArtifact.create(list(artifact.abi), artifact.bytecode, artifact.contract_name)
        return checked.creation_data(constructor_args)

    def _build_transaction(self, w3: Web3, provider: CredentialedProvider, data: str) -> Dict:
        """
        Build the unsigned contract-creation transaction

        Returns:
            Transaction dict with nonce, fees and gas filled in
        """
        logger.info("Building deployment transaction...")
        address = provider.address

        try:
            nonce = w3.eth.get_transaction_count(address)
            chain_id = w3.eth.chain_id
            balance = w3.eth.get_balance(address)
            fees = self._fee_params(w3)
        except OSError as e:
            raise NetworkConnectionError("Lost connection while preparing the transaction", reason=str(e)) from e
        except Exception as e:
            raise TransactionError("RPC request failed while preparing the transaction", reason=str(e)) from e

        transaction = {
            'from': address,
            'value': 0,
            'data': data,
            'nonce': nonce,
            'chainId': chain_id,
            **fees
        }

        if self.gas_limit is not None:
            transaction['gas'] = self.gas_limit
        else:
            transaction['gas'] = self._estimate_gas(w3, {'from': address, 'value': 0, 'data': data})

        fee_per_gas = transaction.get('maxFeePerGas', transaction.get('gasPrice', 0))
        max_cost = transaction['gas'] * fee_per_gas

        logger.info(f"Gas limit: {transaction['gas']}")
        logger.info(f"Max deployment cost: {Web3.from_wei(max_cost, 'ether')} ETH")

        if balance < max_cost:
            raise TransactionError(
                "Insufficient funds for deployment",
                reason=(
                    f"balance {Web3.from_wei(balance, 'ether')} < "
                    f"max cost {Web3.from_wei(max_cost, 'ether')}"
                )
            )

        return transaction

    def _fee_params(self, w3: Web3) -> Dict[str, int]:
        """EIP-1559 fees when the chain has a base fee, legacy gas price otherwise"""
        latest_block = w3.eth.get_block('latest')
        base_fee_wei = latest_block.get('baseFeePerGas')

        if base_fee_wei is None:
            gas_price = w3.eth.gas_price
            logger.info(f"Gas price: {Web3.from_wei(gas_price, 'gwei')} gwei")
            return {'gasPrice': gas_price}

        priority_fee_wei = int(Web3.to_wei(Decimal(str(self.priority_fee_gwei)), 'gwei'))

        # Max fee = base fee * 2 + tip, room for base fee growth
        max_fee_wei = base_fee_wei * 2 + priority_fee_wei

        logger.info(
            f"Base fee: {Web3.from_wei(base_fee_wei, 'gwei')} gwei, "
            f"tip: {self.priority_fee_gwei} gwei"
        )
        return {
            'maxFeePerGas': max_fee_wei,
            'maxPriorityFeePerGas': priority_fee_wei
        }

    def _estimate_gas(self, w3: Web3, call: Dict) -> int:
        try:
            gas_estimate = w3.eth.estimate_gas(call)
        except OSError as e:
            raise NetworkConnectionError("Lost connection during gas estimation", reason=str(e)) from e
        except Exception as e:
            raise TransactionError(
                "Network rejected the contract creation during gas estimation",
                reason=str(e)
            ) from e

        return int(gas_estimate * GAS_ESTIMATE_BUFFER)

    def _submit(self, w3: Web3, provider: CredentialedProvider, transaction: Dict) -> str:
        """Sign and send. Returns the 0x-prefixed transaction hash."""
        logger.info("Signing transaction...")
        try:
            signed_tx = provider.sign_transaction(transaction)
        except Exception as e:
            raise TransactionError("Signing failed", reason=type(e).__name__) from e

        local_hash = Web3.to_hex(signed_tx.hash)

        logger.info("Sending deployment transaction...")
        try:
            tx_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed_tx.raw_transaction))
        except OSError as e:
            # The node may have accepted it before the transport failed
            raise TransactionError(
                "Transport failed while sending, transaction may have been broadcast",
                reason=str(e),
                tx_hash=local_hash
            ) from e
        except Exception as e:
            raise TransactionError("Network rejected the transaction", reason=str(e)) from e

        logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    async def _wait_for_receipt(self, w3: Web3, tx_hash: str) -> Dict:
        """The single suspension point: wait for inclusion"""
        logger.info("Waiting for confirmation...")
        try:
            receipt = await asyncio.to_thread(
                w3.eth.wait_for_transaction_receipt,
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=self.poll_interval
            )
        except TimeExhausted as e:
            raise TransactionError(
                f"Not confirmed within {self.receipt_timeout}s",
                reason=str(e),
                tx_hash=tx_hash
            ) from e
        except OSError as e:
            raise TransactionError(
                "Lost connection while waiting for confirmation",
                reason=str(e),
                tx_hash=tx_hash
            ) from e
        except Exception as e:
            raise TransactionError(
                "Receipt polling failed",
                reason=str(e),
                tx_hash=tx_hash
            ) from e

        if receipt['status'] != 1:
            logger.error(f"Deployment reverted: {tx_hash}")
            raise TransactionError(
                "Contract creation reverted",
                reason=f"gas used {receipt['gasUsed']}",
                tx_hash=tx_hash
            )

        return receipt


async def deploy(
    credentials: Credentials,
    artifact: CompiledArtifact,
    constructor_args: Sequence[Any] = (),
    **options
) -> DeploymentResult:
    """
    Deploy one contract

    Keyword options are passed to DeploymentOrchestrator.
    """
    orchestrator = DeploymentOrchestrator(**options)
    return await orchestrator.deploy(credentials, artifact, constructor_args)


def deploy_sync(
    credentials: Credentials,
    artifact: CompiledArtifact,
    constructor_args: Sequence[Any] = (),
    **options
) -> DeploymentResult:
    """Blocking variant of deploy()"""
    return asyncio.run(deploy(credentials, artifact, constructor_args, **options))

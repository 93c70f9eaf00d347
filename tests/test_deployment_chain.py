"""
End-to-end deployment tests against an in-memory chain
Requires: pip install "web3[tester]"
"""

import pytest

pytest.importorskip("eth_tester")

from web3 import EthereumTesterProvider, Web3

from deployer.artifact import CompiledArtifact
from deployer.credentials import Credentials
from deployer.errors import TransactionError
from deployer.orchestrator import DeploymentOrchestrator

from conftest import ACCOUNT_0, INVALID_BYTECODE, TEST_MNEMONIC

ZERO_ADDRESS = "0x" + "0" * 40


@pytest.fixture
def tester():
    """Fresh in-memory chain"""
    return EthereumTesterProvider()


@pytest.fixture
def chain(tester):
    """Web3 client on the test chain, with the deployer account funded"""
    w3 = Web3(tester)
    tx_hash = w3.eth.send_transaction({
        'from': w3.eth.accounts[0],
        'to': ACCOUNT_0,
        'value': w3.to_wei(10, 'ether')
    })
    w3.eth.wait_for_transaction_receipt(tx_hash)
    return w3


@pytest.fixture
def orchestrator(tester):
    return DeploymentOrchestrator(transport=tester, receipt_timeout=10, poll_interval=0.01)


class TestChainDeployment:
    """Deployment properties on a real EVM"""

    @pytest.mark.asyncio
    async def test_deploys_contract(self, chain, orchestrator, credentials, artifact):
        result = await orchestrator.deploy(credentials, artifact)

        assert result.contract_address != ZERO_ADDRESS
        assert Web3.is_checksum_address(result.contract_address)
        # Runtime code is the single STOP byte returned by the init code
        assert chain.eth.get_code(result.contract_address) == b"\x00"
        assert chain.eth.get_transaction_count(ACCOUNT_0) == 1

    @pytest.mark.asyncio
    async def test_address_follows_sender_nonce(self, chain, orchestrator, credentials, artifact):
        result = await orchestrator.deploy(credentials, artifact)

        assert result.contract_address == "0x5FbDB2315678afecb367f032d93F642f64180aa3"

    @pytest.mark.asyncio
    async def test_two_deployments_two_addresses(self, chain, orchestrator, credentials, artifact):
        first = await orchestrator.deploy(credentials, artifact)
        second = await orchestrator.deploy(credentials, artifact)

        assert first.contract_address != second.contract_address
        assert first.transaction_hash != second.transaction_hash
        assert chain.eth.get_transaction_count(ACCOUNT_0) == 2

    @pytest.mark.asyncio
    async def test_constructor_arguments(self, chain, orchestrator, credentials, constructor_artifact):
        result = await orchestrator.deploy(credentials, constructor_artifact, [ACCOUNT_0, 10**18])

        assert chain.eth.get_code(result.contract_address) == b"\x00"

    @pytest.mark.asyncio
    async def test_rejected_bytecode(self, chain, orchestrator, credentials):
        artifact = CompiledArtifact.create([], INVALID_BYTECODE)

        with pytest.raises(TransactionError):
            await orchestrator.deploy(credentials, artifact)

    @pytest.mark.asyncio
    async def test_rejected_bytecode_with_fixed_gas(self, chain, tester, credentials):
        orchestrator = DeploymentOrchestrator(
            gas_limit=200000,
            transport=tester,
            receipt_timeout=10,
            poll_interval=0.01
        )
        artifact = CompiledArtifact.create([], INVALID_BYTECODE)

        with pytest.raises(TransactionError):
            await orchestrator.deploy(credentials, artifact)

    @pytest.mark.asyncio
    async def test_unfunded_account(self, chain, orchestrator, artifact):
        with Credentials(TEST_MNEMONIC, "development", address_index=7) as creds:
            with pytest.raises(TransactionError):
                await orchestrator.deploy(creds, artifact)

"""
Shared fixtures for deployer tests
"""

from unittest.mock import Mock

import pytest

from deployer.artifact import CompiledArtifact
from deployer.credentials import Credentials

# Well-known development mnemonic (Hardhat / Anvil default accounts)
TEST_MNEMONIC = "test test test test test test test test test test test junk"
ACCOUNT_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ACCOUNT_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

# Init code: CODECOPY one byte (STOP) from offset 12 to memory, RETURN it
MINIMAL_BYTECODE = "0x6001600c60003960016000f300"

# Single INVALID opcode, every creation attempt fails
INVALID_BYTECODE = "0xfe"

CONSTRUCTOR_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "supply", "type": "uint256"}
        ]
    }
]

DEPLOYED_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.fixture
def credentials():
    """Credentials on a local network, wiped after the test"""
    with Credentials(TEST_MNEMONIC, "development") as creds:
        yield creds


@pytest.fixture
def artifact():
    """Artifact with no constructor"""
    return CompiledArtifact.create([], MINIMAL_BYTECODE, contract_name="Minimal")


@pytest.fixture
def constructor_artifact():
    """Artifact whose constructor takes (address, uint256)"""
    return CompiledArtifact.create(CONSTRUCTOR_ABI, MINIMAL_BYTECODE, contract_name="Token")


@pytest.fixture
def mock_w3():
    """Mock Web3 client of a reachable EIP-1559 chain"""
    w3 = Mock()
    w3.eth.chain_id = 1337
    w3.eth.get_transaction_count.return_value = 0
    w3.eth.get_balance.return_value = 10 * 10**18
    w3.eth.get_block.return_value = {'baseFeePerGas': 10**9}
    w3.eth.gas_price = 2 * 10**9
    w3.eth.estimate_gas.return_value = 100000
    w3.eth.send_raw_transaction.return_value = bytes.fromhex('ab' * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {
        'status': 1,
        'contractAddress': DEPLOYED_ADDRESS,
        'blockNumber': 1,
        'gasUsed': 60000
    }
    return w3

"""
Unit Tests for the Network Client
"""

from unittest.mock import Mock, PropertyMock, patch

import pytest

from deployer.client import connect
from deployer.credentials import Credentials
from deployer.errors import NetworkConnectionError
from deployer.provider import CredentialedProvider

from conftest import TEST_MNEMONIC


@pytest.fixture
def sepolia_provider(monkeypatch):
    """Provider for the named sepolia network"""
    monkeypatch.setenv("SEPOLIA_RPC_URL", "https://sepolia.example.org/v3/key")
    creds = Credentials(TEST_MNEMONIC, "sepolia")
    with CredentialedProvider(creds, transport=Mock()) as provider:
        yield provider
    creds.wipe()


class TestConnect:
    """Connectivity check when the client is attached"""

    def test_connected(self, sepolia_provider):
        with patch('deployer.client.Web3') as web3_cls:
            w3 = web3_cls.return_value
            w3.is_connected.return_value = True
            w3.eth.chain_id = 11155111

            assert connect(sepolia_provider) is w3
            web3_cls.assert_called_once_with(sepolia_provider.transport)

    def test_unreachable(self, sepolia_provider):
        with patch('deployer.client.Web3') as web3_cls:
            web3_cls.return_value.is_connected.return_value = False

            with pytest.raises(NetworkConnectionError) as exc_info:
                connect(sepolia_provider)

        # API key in the URL path is not echoed back
        assert "key" not in str(exc_info.value)

    def test_transport_error(self, sepolia_provider):
        with patch('deployer.client.Web3') as web3_cls:
            web3_cls.return_value.is_connected.side_effect = ConnectionRefusedError("refused")

            with pytest.raises(NetworkConnectionError):
                connect(sepolia_provider)

    def test_wrong_chain(self, sepolia_provider):
        with patch('deployer.client.Web3') as web3_cls:
            w3 = web3_cls.return_value
            w3.is_connected.return_value = True
            w3.eth.chain_id = 1

            with pytest.raises(NetworkConnectionError, match="expected 11155111"):
                connect(sepolia_provider)

    def test_chain_id_rejected(self, sepolia_provider):
        with patch('deployer.client.Web3') as web3_cls:
            w3 = web3_cls.return_value
            w3.is_connected.return_value = True
            type(w3.eth).chain_id = PropertyMock(side_effect=ValueError("method not found"))

            with pytest.raises(NetworkConnectionError, match="rejected"):
                connect(sepolia_provider)

    def test_unknown_chain_not_checked(self):
        creds = Credentials(TEST_MNEMONIC, "http://127.0.0.1:8545")
        provider = CredentialedProvider(creds, transport=Mock())

        with patch('deployer.client.Web3') as web3_cls:
            w3 = web3_cls.return_value
            w3.is_connected.return_value = True
            w3.eth.chain_id = 31337

            assert connect(provider) is w3

    def test_refused_port(self):
        # Real HTTP transport, nothing listening
        creds = Credentials(TEST_MNEMONIC, "http://127.0.0.1:9")
        provider = CredentialedProvider(creds, rpc_timeout=2)

        with pytest.raises(NetworkConnectionError):
            connect(provider)

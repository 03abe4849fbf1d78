"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

import httpx

from solana_exporter.helpers.rpc import SolanaRPCClient
from solana_exporter.history.decoding import decode_transaction
from solana_exporter.history.models import RawTransaction
from tests.factories import TEST_RPC_URL, make_tx_payload


@pytest.fixture
def rpc_client() -> SolanaRPCClient:
    """Real RPC client pointed at a mocked endpoint, without backoff delays.

    Returns:
        SolanaRPCClient: Client that tries each request once
    """
    return SolanaRPCClient(TEST_RPC_URL, max_retries=1, base_delay=0.0)


@pytest.fixture
def mock_rpc_client() -> MagicMock:
    """Stand-in ledger client whose methods are AsyncMocks.

    Returns:
        MagicMock: Mock with get_transaction, list_signatures and get_account_info
    """
    client = MagicMock(spec=SolanaRPCClient)
    client.get_transaction = AsyncMock()
    client.list_signatures = AsyncMock(return_value=[])
    client.get_account_info = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """Placeholder HTTP client handed to mocked ledger calls."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def fee_only_tx() -> RawTransaction:
    """Transaction in which the wallet only paid the fee."""
    return decode_transaction("sig1", make_tx_payload())

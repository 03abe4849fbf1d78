"""Solana JSON-RPC client utilities."""

import base64
import binascii

from typing import Any

import httpx

from solana_exporter.errors import RPCError, TransportError
from solana_exporter.helpers.constants import (
    DEFAULT_TIMEOUT,
    MAX_RETRIES,
    RETRY_BASE_DELAY,
    SIGNATURES_PAGE_SIZE,
)
from solana_exporter.helpers.http import retry_with_backoff
from solana_exporter.helpers.logging import get_logger
from solana_exporter.helpers.rpc_models import (
    GetAccountInfoRequest,
    GetSignaturesForAddressRequest,
    GetTransactionRequest,
    JsonRpcRequest,
    SignatureInfo,
)


logger = get_logger(__name__)


class SolanaRPCClient:
    """Solana JSON-RPC client.

    The HTTP client is passed to every call so one connection pool can be
    shared across a whole export. Transport failures (timeouts, HTTP errors,
    rate limiting) are retried with exponential backoff; JSON-RPC error
    objects are not.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        max_retries: int = MAX_RETRIES,
        base_delay: float = RETRY_BASE_DELAY,
    ) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Solana JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds
            max_retries: Attempts per request before giving up
            base_delay: Initial backoff delay in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max_retries
        self._post = retry_with_backoff(
            max_retries, base_delay, retry_on=(httpx.HTTPError, TransportError)
        )(self._post_once)

    async def _post_once(
        self, client: httpx.AsyncClient, payload: dict[str, Any], timeout: float
    ) -> Any:
        response = await client.post(self.rpc_url, json=payload, timeout=timeout)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            # Proxies answer 200 with HTML or plain text when the node is down
            msg = f"Non-JSON response from {self.rpc_url}: {response.text[:80]!r}"
            raise TransportError(msg) from e

    async def call(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Make a single JSON-RPC call.

        Args:
            client: HTTP client instance
            request: Request model (method, params, id)
            timeout: Optional timeout override

        Returns:
            RPC result value

        Raises:
            httpx.HTTPError: If the HTTP request still fails after retries
            RPCError: If the RPC response contains an error
            TransportError: If the body is not JSON or not a JSON-RPC object
        """
        body = await self._post(
            client, request.model_dump(), timeout or self.timeout
        )

        if not isinstance(body, dict):
            msg = f"Unexpected {request.method} response: {body!r}"
            raise TransportError(msg)

        if body.get("error") is not None:
            raise RPCError(request.method, body["error"])

        return body.get("result")

    async def get_signatures_for_address(
        self,
        client: httpx.AsyncClient,
        address: str,
        *,
        before: str | None = None,
        limit: int = SIGNATURES_PAGE_SIZE,
    ) -> list[SignatureInfo]:
        """Fetch one page of signatures for an address, newest first.

        Args:
            client: HTTP client instance
            address: Base58 wallet address
            before: Only return signatures older than this one
            limit: Page size (at most 1000)

        Returns:
            Signature descriptors in ledger order
        """
        request = GetSignaturesForAddressRequest.build(
            address, before=before, limit=limit
        )
        result = await self.call(client, request)
        return [SignatureInfo.model_validate(entry) for entry in result or []]

    async def list_signatures(
        self,
        client: httpx.AsyncClient,
        address: str,
        max_signatures: int | None = None,
    ) -> list[SignatureInfo]:
        """Walk getSignaturesForAddress pages until history or the cap runs out.

        Args:
            client: HTTP client instance
            address: Base58 wallet address
            max_signatures: Stop once this many signatures are collected
                (None or 0 for the whole history)

        Returns:
            Signature descriptors, newest first

        Example:
            ```python
            rpc = SolanaRPCClient(rpc_url)
            async with create_http_client() as client:
                signatures = await rpc.list_signatures(client, wallet, 50)
            ```
        """
        signatures: list[SignatureInfo] = []
        before: str | None = None

        while True:
            limit = SIGNATURES_PAGE_SIZE
            if max_signatures:
                limit = min(limit, max_signatures - len(signatures))

            page = await self.get_signatures_for_address(
                client, address, before=before, limit=limit
            )
            signatures.extend(page)
            logger.debug("Fetched %d signatures (total %d)", len(page), len(signatures))

            if len(page) < limit:
                break
            if max_signatures and len(signatures) >= max_signatures:
                break
            before = page[-1].signature

        return signatures

    async def get_transaction(
        self, client: httpx.AsyncClient, signature: str
    ) -> dict[str, Any]:
        """Fetch one transaction in the raw JSON encoding.

        Args:
            client: HTTP client instance
            signature: Base58 transaction signature

        Returns:
            The getTransaction result object

        Raises:
            TransportError: If the node has no such transaction
        """
        result = await self.call(client, GetTransactionRequest.build(signature))
        if result is None:
            msg = f"Transaction {signature} not found"
            raise TransportError(msg)
        if not isinstance(result, dict):
            msg = f"Unexpected getTransaction result for {signature}"
            raise TransportError(msg)
        return result

    async def get_account_info(
        self, client: httpx.AsyncClient, address: str
    ) -> bytes | None:
        """Fetch raw account data.

        Args:
            client: HTTP client instance
            address: Base58 account address

        Returns:
            Account data bytes, or None if the account does not exist

        Raises:
            TransportError: If the result is malformed or not base64 encoded
        """
        result = await self.call(client, GetAccountInfoRequest.build(address))
        if result is None:
            return None
        if not isinstance(result, dict):
            msg = f"Unexpected getAccountInfo result for {address}"
            raise TransportError(msg)

        value = result.get("value")
        if value is None:
            return None
        if not isinstance(value, dict):
            msg = f"Unexpected getAccountInfo result for {address}"
            raise TransportError(msg)

        data = value.get("data")
        if not isinstance(data, list) or len(data) != 2 or data[1] != "base64":
            msg = f"Unexpected account data encoding for {address}"
            raise TransportError(msg)

        try:
            return base64.b64decode(data[0], validate=True)
        except (binascii.Error, ValueError) as e:
            msg = f"Invalid base64 account data for {address}"
            raise TransportError(msg) from e


__all__ = [
    "SolanaRPCClient",
]

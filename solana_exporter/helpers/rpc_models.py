"""Pydantic models for Solana JSON-RPC requests and responses."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from solana_exporter.helpers.constants import (
    DEFAULT_COMMITMENT,
    DEFAULT_ENCODING,
    MAX_SUPPORTED_TRANSACTION_VERSION,
    SIGNATURES_PAGE_SIZE,
)


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(..., description="Request ID")


class GetSignaturesForAddressRequest(JsonRpcRequest):
    """JSON-RPC request for getSignaturesForAddress."""

    method: str = Field(default="getSignaturesForAddress", frozen=True)

    @classmethod
    def build(
        cls,
        address: str,
        *,
        before: str | None = None,
        limit: int = SIGNATURES_PAGE_SIZE,
        commitment: str = DEFAULT_COMMITMENT,
        request_id: int = 1,
    ) -> Self:
        """Build a page request, newest first, optionally older than ``before``."""
        options: dict[str, Any] = {"limit": limit, "commitment": commitment}
        if before:
            options["before"] = before
        return cls(params=[address, options], id=request_id)


class GetTransactionRequest(JsonRpcRequest):
    """JSON-RPC request for getTransaction."""

    method: str = Field(default="getTransaction", frozen=True)

    @classmethod
    def build(
        cls,
        signature: str,
        *,
        encoding: str = DEFAULT_ENCODING,
        commitment: str = DEFAULT_COMMITMENT,
        request_id: int = 1,
    ) -> Self:
        """Build a request for one transaction in the raw JSON encoding."""
        options = {
            "encoding": encoding,
            "commitment": commitment,
            "maxSupportedTransactionVersion": MAX_SUPPORTED_TRANSACTION_VERSION,
        }
        return cls(params=[signature, options], id=request_id)


class GetAccountInfoRequest(JsonRpcRequest):
    """JSON-RPC request for getAccountInfo."""

    method: str = Field(default="getAccountInfo", frozen=True)

    @classmethod
    def build(
        cls,
        address: str,
        *,
        commitment: str = DEFAULT_COMMITMENT,
        request_id: int = 1,
    ) -> Self:
        """Build a request for account data as base64."""
        options = {"encoding": "base64", "commitment": commitment}
        return cls(params=[address, options], id=request_id)


class SignatureInfo(BaseModel):
    """One entry of a getSignaturesForAddress result."""

    signature: str = Field(..., description="Base58 transaction signature")
    slot: int | None = Field(default=None, description="Slot of the transaction")
    err: Any = Field(default=None, description="Error object if the transaction failed")
    memo: str | None = Field(default=None, description="Memo attached to the transaction")
    block_time: int | None = Field(
        default=None, description="Unix block time", alias="blockTime"
    )
    confirmation_status: str | None = Field(
        default=None, description="Cluster confirmation status", alias="confirmationStatus"
    )

    model_config = ConfigDict(extra="allow", populate_by_name=True)


__all__ = [
    "GetAccountInfoRequest",
    "GetSignaturesForAddressRequest",
    "GetTransactionRequest",
    "JsonRpcRequest",
    "SignatureInfo",
]

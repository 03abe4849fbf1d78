"""Builders for getTransaction payloads and related test data."""

import base64
import struct
from decimal import Decimal

from typing import Any

import base58

from solana_exporter.helpers.constants import (
    METADATA_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from solana_exporter.history.models import BalanceDelta


TEST_RPC_URL = "https://rpc.test"

WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
COUNTERPARTY = "4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"

BLOCK_TIME = 1_700_000_000
BLOCK_DATE = "2023-11-14 22:13:20"
FEE = 5000


def token_entry(
    account_index: int,
    mint: str,
    owner: str | None,
    amount: str,
    decimals: int = 6,
) -> dict[str, Any]:
    """An RPC token balance entry with an exact uiAmountString."""
    raw = int(Decimal(amount).scaleb(decimals))
    return {
        "accountIndex": account_index,
        "mint": mint,
        "owner": owner,
        "programId": TOKEN_PROGRAM_ID,
        "uiTokenAmount": {
            "amount": str(raw),
            "decimals": decimals,
            "uiAmount": float(amount),
            "uiAmountString": amount,
        },
    }


def system_transfer_data(lamports: int) -> str:
    """Base58 payload of a System Program Transfer."""
    return base58.b58encode(struct.pack("<IQ", 2, lamports)).decode()


def token_transfer_data(amount: int) -> str:
    """Base58 payload of an SPL Token Transfer."""
    return base58.b58encode(struct.pack("<BQ", 3, amount)).decode()


def make_tx_payload(
    *,
    account_keys: list[str] | None = None,
    pre_balances: list[int] | None = None,
    post_balances: list[int] | None = None,
    pre_token_balances: list[dict[str, Any]] | None = None,
    post_token_balances: list[dict[str, Any]] | None = None,
    instructions: list[dict[str, Any]] | None = None,
    inner_instructions: list[dict[str, Any]] | None = None,
    loaded_addresses: dict[str, list[str]] | None = None,
    fee: int = FEE,
    block_time: int | None = BLOCK_TIME,
    signature: str = "sig1",
) -> dict[str, Any]:
    """A getTransaction result in the raw JSON encoding.

    Defaults describe the wallet paying the fee and nothing else.
    """
    keys = account_keys or [WALLET, COUNTERPARTY, SYSTEM_PROGRAM_ID]
    pre = pre_balances if pre_balances is not None else [10_000_000_000, 0, 1]
    post = post_balances if post_balances is not None else [10_000_000_000 - fee, 0, 1]
    meta: dict[str, Any] = {
        "err": None,
        "fee": fee,
        "preBalances": pre,
        "postBalances": post,
        "preTokenBalances": pre_token_balances if pre_token_balances is not None else [],
        "postTokenBalances": post_token_balances if post_token_balances is not None else [],
        "innerInstructions": inner_instructions or [],
        "logMessages": [],
    }
    if loaded_addresses is not None:
        meta["loadedAddresses"] = loaded_addresses

    return {
        "slot": 250_000_000,
        "blockTime": block_time,
        "meta": meta,
        "transaction": {
            "signatures": [signature],
            "message": {
                "accountKeys": keys,
                "header": {
                    "numRequiredSignatures": 1,
                    "numReadonlySignedAccounts": 0,
                    "numReadonlyUnsignedAccounts": 1,
                },
                "instructions": instructions or [],
                "recentBlockhash": "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N",
            },
        },
        "version": "legacy",
    }


def metadata_account_data(symbol: str, name: str = "Test Token") -> bytes:
    """Metaplex metadata account bytes with NUL padded name, symbol and uri."""

    def borsh_string(value: str, width: int) -> bytes:
        encoded = value.encode().ljust(width, b"\x00")
        return struct.pack("<I", len(encoded)) + encoded

    return (
        bytes([4])
        + bytes(32)
        + bytes(32)
        + borsh_string(name, 32)
        + borsh_string(symbol, 10)
        + borsh_string("https://example.com/token.json", 200)
    )


def account_info_result(data: bytes | None) -> dict[str, Any]:
    """A getAccountInfo result wrapping ``data`` as base64."""
    if data is None:
        return {"context": {"slot": 1}, "value": None}
    return {
        "context": {"slot": 1},
        "value": {
            "data": [base64.b64encode(data).decode(), "base64"],
            "executable": False,
            "lamports": 5_616_720,
            "owner": METADATA_PROGRAM_ID,
            "rentEpoch": 0,
        },
    }


def delta(
    native: str | Decimal, token: str | Decimal = "0", mint: str | None = None
) -> BalanceDelta:
    """A BalanceDelta from plain strings."""
    return BalanceDelta(
        native_delta=Decimal(native),
        token_delta=Decimal(token),
        token_mint=mint,
    )

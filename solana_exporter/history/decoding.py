"""Decode getTransaction payloads into RawTransaction models."""

from typing import Any

from pydantic import ValidationError

from solana_exporter.errors import MissingMetadataError, UnsupportedEncodingError
from solana_exporter.helpers.logging import get_logger
from solana_exporter.history.models import RawTransaction


logger = get_logger(__name__)


def _compiled_only(instructions: list[Any] | None, context: str) -> list[dict[str, Any]]:
    """Keep compiled instructions; parsed ones carry no account indices."""
    compiled: list[dict[str, Any]] = []
    for instruction in instructions or []:
        if isinstance(instruction, dict) and "programIdIndex" in instruction:
            compiled.append(instruction)
        else:
            logger.warning("Parsed instruction not supported yet (%s), skipping", context)
    return compiled


def _message_of(signature: str, payload: dict[str, Any]) -> dict[str, Any]:
    transaction = payload.get("transaction")
    if not isinstance(transaction, dict):
        # base58/base64 encodings come back as [data, encoding]
        msg = f"Unsupported transaction encoding for {signature}"
        raise UnsupportedEncodingError(msg)

    message = transaction.get("message")
    if not isinstance(message, dict):
        msg = f"Unsupported message format for {signature}"
        raise UnsupportedEncodingError(msg)

    account_keys = message.get("accountKeys")
    if not isinstance(account_keys, list) or not all(
        isinstance(key, str) for key in account_keys
    ):
        # jsonParsed messages carry {"pubkey": ...} objects instead of strings
        msg = f"Unsupported message format for {signature}"
        raise UnsupportedEncodingError(msg)

    return message


def decode_transaction(signature: str, payload: dict[str, Any]) -> RawTransaction:
    """Turn a raw-JSON getTransaction result into a RawTransaction.

    Loaded addresses of versioned transactions are appended to the static
    account keys (writable first, then readonly), which is the order the
    balance arrays use.

    Args:
        signature: Signature the payload was fetched for
        payload: The getTransaction result object

    Returns:
        RawTransaction: The decoded transaction

    Raises:
        UnsupportedEncodingError: If the payload is not in the raw JSON encoding
        MissingMetadataError: If the status metadata is absent or inconsistent
    """
    message = _message_of(signature, payload)

    meta = payload.get("meta")
    if not isinstance(meta, dict):
        msg = f"Missing transaction metadata for {signature}"
        raise MissingMetadataError(msg)

    if meta.get("preBalances") is None or meta.get("postBalances") is None:
        msg = f"Missing native balances for {signature}"
        raise MissingMetadataError(msg)

    account_keys = list(message["accountKeys"])
    loaded = meta.get("loadedAddresses") or {}
    account_keys.extend(loaded.get("writable") or [])
    account_keys.extend(loaded.get("readonly") or [])

    inner_groups = [
        {
            "index": group.get("index", 0),
            "instructions": _compiled_only(group.get("instructions"), "inner"),
        }
        for group in meta.get("innerInstructions") or []
        if isinstance(group, dict)
    ]

    try:
        return RawTransaction.model_validate({
            "signature": signature,
            "block_time": payload.get("blockTime"),
            "fee": meta.get("fee") or 0,
            "account_keys": account_keys,
            "instructions": _compiled_only(message.get("instructions"), "top-level"),
            "inner_instructions": inner_groups,
            "pre_balances": meta["preBalances"],
            "post_balances": meta["postBalances"],
            "pre_token_balances": meta.get("preTokenBalances"),
            "post_token_balances": meta.get("postTokenBalances"),
            "err": meta.get("err"),
        })
    except ValidationError as e:
        msg = f"Malformed transaction metadata for {signature}: {e.error_count()} errors"
        raise MissingMetadataError(msg) from e


__all__ = ["decode_transaction"]

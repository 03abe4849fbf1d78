"""Parsing utilities for common data transformations."""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from typing import Any

from solana_exporter.helpers.constants import LAMPORTS_PER_SOL, NEGLIGIBLE_AMOUNT


DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def lamports_to_sol(lamports: int | None) -> Decimal:
    """Convert lamports to SOL (divide by 1e9).

    Args:
        lamports: Amount in lamports, or None

    Returns:
        Decimal: Amount in SOL, zero if input was None

    Example:
        >>> lamports_to_sol(1_500_000_000)
        Decimal('1.5')
        >>> lamports_to_sol(None)
        Decimal('0')
    """
    if lamports is None:
        return Decimal(0)
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)


def format_block_time(block_time: int | None) -> str:
    """Format a Unix block time as a UTC date string.

    Args:
        block_time: Unix timestamp in seconds, or None

    Returns:
        str: ``YYYY-MM-DD HH:MM:SS``; the epoch when block_time is missing

    Example:
        >>> format_block_time(1700000000)
        '2023-11-14 22:13:20'
        >>> format_block_time(None)
        '1970-01-01 00:00:00'
    """
    try:
        moment = datetime.fromtimestamp(block_time or 0, tz=UTC)
    except (OverflowError, OSError, ValueError):
        moment = datetime.fromtimestamp(0, tz=UTC)
    return moment.strftime(DATE_FORMAT)


def parse_ui_token_amount(ui_token_amount: dict[str, Any] | None) -> Decimal:
    """Parse the display amount out of an RPC ``uiTokenAmount`` object.

    ``uiAmountString`` is exact and preferred; ``amount``/``decimals`` is the
    next best thing, and the float ``uiAmount`` is the last resort.

    Args:
        ui_token_amount: The ``uiTokenAmount`` mapping, or None

    Returns:
        Decimal: Token amount in display units, zero when nothing parses

    Example:
        >>> parse_ui_token_amount({"amount": "1500", "decimals": 3, "uiAmountString": "1.5"})
        Decimal('1.5')
        >>> parse_ui_token_amount(None)
        Decimal('0')
    """
    if not ui_token_amount:
        return Decimal(0)

    ui_amount_string = ui_token_amount.get("uiAmountString")
    if ui_amount_string not in (None, ""):
        try:
            return Decimal(str(ui_amount_string))
        except InvalidOperation:
            pass

    raw_amount = ui_token_amount.get("amount")
    decimals = ui_token_amount.get("decimals")
    if raw_amount not in (None, "") and decimals is not None:
        try:
            return Decimal(str(raw_amount)).scaleb(-int(decimals))
        except (InvalidOperation, TypeError, ValueError):
            pass

    ui_amount = ui_token_amount.get("uiAmount")
    if ui_amount is not None:
        try:
            return Decimal(str(ui_amount))
        except InvalidOperation:
            pass

    return Decimal(0)


def is_negligible(amount: Decimal | None) -> bool:
    """Whether an amount is effectively zero.

    Example:
        >>> is_negligible(Decimal("0.0000000000001"))
        True
        >>> is_negligible(Decimal("0.000000001"))
        False
    """
    return amount is None or abs(amount) < NEGLIGIBLE_AMOUNT


def non_negligible(amount: Decimal | None) -> Decimal | None:
    """Return the amount, or None when it is effectively zero.

    Example:
        >>> non_negligible(Decimal("1.5"))
        Decimal('1.5')
        >>> non_negligible(Decimal(0)) is None
        True
    """
    return None if is_negligible(amount) else amount


def format_amount(amount: Decimal) -> str:
    """Render a Decimal in plain notation without trailing zeros.

    Example:
        >>> format_amount(Decimal("200.000"))
        '200'
        >>> format_amount(Decimal("0.000005000"))
        '0.000005'
    """
    if amount.is_zero():
        return "0"
    return format(amount.normalize(), "f")


__all__ = [
    "DATE_FORMAT",
    "format_amount",
    "format_block_time",
    "is_negligible",
    "lamports_to_sol",
    "non_negligible",
    "parse_ui_token_amount",
]

"""Map delta signs to a transaction category."""

from decimal import Decimal

from solana_exporter.helpers.parsers import non_negligible
from solana_exporter.history.models import BalanceDelta, TransactionCategory


def classify(
    native_delta: Decimal | None, token_delta: Decimal | None
) -> TransactionCategory:
    """Classify a transaction from its native and token deltas.

    Rules are evaluated top to bottom, first match wins. ``None`` means the
    balance did not move. Both-positive and both-negative deltas are not
    covered and deliberately map to UNKNOWN, as does no movement at all.

    | native | token | category        |
    |--------|-------|-----------------|
    | > 0    | < 0   | TOKEN_SWAP      |
    | > 0    | None  | SOL_DEPOSIT     |
    | < 0    | None  | SOL_WITHDRAWAL  |
    | None   | > 0   | TOKEN_DEPOSIT   |
    | None   | < 0   | TOKEN_WITHDRAWAL|
    | < 0    | > 0   | TOKEN_PURCHASE  |
    | other  |       | UNKNOWN         |

    Args:
        native_delta: SOL delta, or None
        token_delta: Token delta, or None

    Returns:
        TransactionCategory: The first matching category
    """
    if native_delta is not None and token_delta is not None:
        if native_delta > 0 and token_delta < 0:
            return TransactionCategory.TOKEN_SWAP
        if native_delta < 0 and token_delta > 0:
            return TransactionCategory.TOKEN_PURCHASE
        return TransactionCategory.UNKNOWN

    if native_delta is not None:
        if native_delta > 0:
            return TransactionCategory.SOL_DEPOSIT
        if native_delta < 0:
            return TransactionCategory.SOL_WITHDRAWAL

    if token_delta is not None:
        if token_delta > 0:
            return TransactionCategory.TOKEN_DEPOSIT
        if token_delta < 0:
            return TransactionCategory.TOKEN_WITHDRAWAL

    return TransactionCategory.UNKNOWN


def classify_delta(delta: BalanceDelta) -> TransactionCategory:
    """Classify a BalanceDelta, treating negligible amounts as no movement."""
    return classify(non_negligible(delta.native_delta), non_negligible(delta.token_delta))


__all__ = ["classify", "classify_delta"]

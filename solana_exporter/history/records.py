"""Assemble output records from balance deltas."""

from decimal import Decimal

from typing import Protocol

from solana_exporter.helpers.constants import NATIVE_CURRENCY, UNKNOWN_TOKEN_SYMBOL
from solana_exporter.helpers.logging import get_logger
from solana_exporter.helpers.parsers import (
    format_block_time,
    is_negligible,
    lamports_to_sol,
)
from solana_exporter.history.models import (
    BalanceDelta,
    RawTransaction,
    TransactionCategory,
    TransactionRecord,
)


logger = get_logger(__name__)


class SymbolSource(Protocol):
    """Anything that can turn a mint into a display symbol."""

    async def resolve(self, mint: str) -> str | None: ...


class RecordBuilder:
    """Build TransactionRecords, resolving token labels on demand."""

    def __init__(
        self,
        symbol_resolver: SymbolSource | None = None,
        *,
        native_currency: str = NATIVE_CURRENCY,
        placeholder: str = UNKNOWN_TOKEN_SYMBOL,
    ) -> None:
        """Initialize the builder.

        Args:
            symbol_resolver: Mint to symbol lookup; None always uses the placeholder
            native_currency: Label for native amounts and fees
            placeholder: Label used when a token symbol cannot be resolved
        """
        self.symbol_resolver = symbol_resolver
        self.native_currency = native_currency
        self.placeholder = placeholder

    async def token_label(self, mint: str | None) -> str:
        """Display label for a mint, falling back to the placeholder."""
        if mint is None or self.symbol_resolver is None:
            return self.placeholder
        symbol = await self.symbol_resolver.resolve(mint)
        return symbol or self.placeholder

    async def _currency(
        self, native: Decimal, token: Decimal, mint: str | None, sign: int
    ) -> str | None:
        if native * sign > 0:
            return self.native_currency
        if token * sign > 0:
            return await self.token_label(mint)
        return None

    async def build(
        self,
        tx: RawTransaction,
        delta: BalanceDelta,
        category: TransactionCategory,
    ) -> TransactionRecord:
        """Build the record of one transaction.

        Sent is the magnitude of the smaller delta when either is negative,
        received the larger delta when either is positive. The native label
        wins when the native delta has the matching sign.

        Args:
            tx: Decoded transaction (date, hash, addresses, fee)
            delta: Wallet balance delta
            category: Category of the transaction, for logging

        Returns:
            TransactionRecord: The immutable output record
        """
        native = delta.native_delta if not is_negligible(delta.native_delta) else Decimal(0)
        token = delta.token_delta if not is_negligible(delta.token_delta) else Decimal(0)

        sent_amount = abs(min(native, token)) if native < 0 or token < 0 else None
        received_amount = max(native, token) if native > 0 or token > 0 else None

        record = TransactionRecord(
            date=format_block_time(tx.block_time),
            tx_hash=tx.signature,
            tx_src=tx.account_keys[0] if tx.account_keys else "",
            tx_dest=tx.account_keys[1] if len(tx.account_keys) > 1 else "",
            sent_amount=sent_amount,
            sent_currency=await self._currency(native, token, delta.token_mint, -1),
            received_amount=received_amount,
            received_currency=await self._currency(native, token, delta.token_mint, 1),
            fee_amount=lamports_to_sol(tx.fee),
            fee_currency=self.native_currency,
        )

        logger.info(
            "Detected transaction %s: type %s, sent %s %s, received %s %s",
            tx.signature,
            category.value,
            record.sent_amount,
            record.sent_currency,
            record.received_amount,
            record.received_currency,
        )
        return record


__all__ = ["RecordBuilder", "SymbolSource"]

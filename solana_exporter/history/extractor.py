"""Balance delta extraction.

Amounts always come from the pre/post balance snapshots. Instructions are
only scanned to tell native transfers from token transfers for diagnostics.

Token balances are correlated by ``(account_index, mint, owner)``, never by
list position: the node may list an account in one snapshot but not the
other when it is opened or closed within the transaction, and the two lists
need not share an order.
"""

from collections import Counter
from decimal import Decimal
from enum import StrEnum

from solana_exporter.helpers.constants import (
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)
from solana_exporter.helpers.logging import get_logger
from solana_exporter.helpers.parsers import lamports_to_sol
from solana_exporter.history.models import (
    BalanceDelta,
    Instruction,
    InstructionKind,
    RawTransaction,
    TokenBalanceEntry,
)


logger = get_logger(__name__)

# System program instruction tags (u32 little-endian)
SYSTEM_TRANSFER_TAGS = frozenset({2, 11})  # Transfer, TransferWithSeed

# Token program instruction tags (u8)
TOKEN_TRANSFER_TAGS = frozenset({3, 12})  # Transfer, TransferChecked

TOKEN_PROGRAM_IDS = frozenset({TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID})

TokenKey = tuple[int, str, str | None]


class MintSelectionPolicy(StrEnum):
    """How the single reported mint is picked when several mints moved."""

    LARGEST_ABSOLUTE = "largest_absolute"
    """Mint with the largest absolute net change; ties go to the later mint."""

    LAST_NON_ZERO = "last_non_zero"
    """Mint of the last non-zero account change in snapshot order."""


def native_balance_change(tx: RawTransaction, wallet: str) -> Decimal:
    """Change of the wallet's lamport balance in SOL, before fee adjustment.

    Only the first position of the wallet in the account-key table is used.

    Args:
        tx: Decoded transaction
        wallet: Wallet address

    Returns:
        Decimal: ``(post - pre) / LAMPORTS_PER_SOL``, zero if the wallet is absent
    """
    indices = tx.wallet_indices(wallet)
    if not indices:
        return Decimal(0)
    if len(indices) > 1:
        logger.warning(
            "Wallet appears at %d account indices in %s, using index %d",
            len(indices),
            tx.signature,
            indices[0],
        )

    index = indices[0]
    return lamports_to_sol(tx.post_balances[index] - tx.pre_balances[index])


def _index_wallet_entries(
    entries: list[TokenBalanceEntry], wallet: str
) -> dict[TokenKey, TokenBalanceEntry]:
    indexed: dict[TokenKey, TokenBalanceEntry] = {}
    for entry in entries:
        if entry.owner != wallet:
            continue
        if entry.key in indexed:
            logger.debug("Duplicate token balance entry %s, keeping the first", entry.key)
            continue
        indexed[entry.key] = entry
    return indexed


def token_balance_changes(tx: RawTransaction, wallet: str) -> list[tuple[str, Decimal]]:
    """Per-account token balance changes of the wallet, in snapshot order.

    Accounts present in only one snapshot count as holding zero in the
    other. Accounts whose balance did not change are left out.

    Args:
        tx: Decoded transaction
        wallet: Wallet address (token account owner)

    Returns:
        List of ``(mint, post - pre)`` pairs; empty when either snapshot is missing
    """
    if tx.pre_token_balances is None or tx.post_token_balances is None:
        return []

    pre = _index_wallet_entries(tx.pre_token_balances, wallet)
    post = _index_wallet_entries(tx.post_token_balances, wallet)

    changes: list[tuple[str, Decimal]] = []
    for key in [*pre, *(k for k in post if k not in pre)]:
        pre_amount = pre[key].ui_amount if key in pre else Decimal(0)
        post_amount = post[key].ui_amount if key in post else Decimal(0)
        difference = post_amount - pre_amount
        if difference != 0:
            changes.append((key[1], difference))
    return changes


def select_dominant_mint(
    changes: list[tuple[str, Decimal]],
    policy: MintSelectionPolicy = MintSelectionPolicy.LARGEST_ABSOLUTE,
) -> str | None:
    """Pick the mint reported for a transaction.

    Args:
        changes: ``(mint, difference)`` pairs from token_balance_changes
        policy: Selection policy

    Returns:
        The chosen mint, or None if nothing changed
    """
    if not changes:
        return None

    if policy is MintSelectionPolicy.LAST_NON_ZERO:
        return changes[-1][0]

    per_mint = net_by_mint(changes)
    dominant: str | None = None
    largest = Decimal(-1)
    for mint, amount in per_mint.items():
        if abs(amount) >= largest:
            dominant, largest = mint, abs(amount)
    return dominant


def net_by_mint(changes: list[tuple[str, Decimal]]) -> dict[str, Decimal]:
    """Sum account changes per mint, in order of first appearance."""
    per_mint: dict[str, Decimal] = {}
    for mint, difference in changes:
        per_mint[mint] = per_mint.get(mint, Decimal(0)) + difference
    return per_mint


def classify_instruction(
    instruction: Instruction, account_keys: list[str]
) -> InstructionKind:
    """Tell native transfers and token transfers apart from everything else."""
    program_id = instruction.program_id(account_keys)
    if program_id not in (SYSTEM_PROGRAM_ID, *TOKEN_PROGRAM_IDS):
        return InstructionKind.OTHER

    payload = instruction.payload()
    if not payload:
        return InstructionKind.OTHER

    if program_id == SYSTEM_PROGRAM_ID:
        if len(payload) >= 4 and int.from_bytes(payload[:4], "little") in SYSTEM_TRANSFER_TAGS:
            return InstructionKind.SYSTEM_TRANSFER
        return InstructionKind.OTHER

    if payload[0] in TOKEN_TRANSFER_TAGS:
        return InstructionKind.TOKEN_TRANSFER
    return InstructionKind.OTHER


def scan_instruction_kinds(tx: RawTransaction) -> dict[InstructionKind, int]:
    """Count instruction kinds across top-level and inner instructions."""
    counts = Counter(
        classify_instruction(instruction, tx.account_keys)
        for instruction in tx.iter_instructions()
    )
    return dict(counts)


class BalanceDeltaExtractor:
    """Compute the wallet's native and token deltas for one transaction."""

    def __init__(
        self, mint_policy: MintSelectionPolicy = MintSelectionPolicy.LARGEST_ABSOLUTE
    ) -> None:
        self.mint_policy = mint_policy

    def extract(self, tx: RawTransaction, wallet: str) -> BalanceDelta:
        """Extract the balance delta of ``wallet`` in ``tx``.

        The fee is subtracted from the native delta whether or not the wallet
        paid it.

        Args:
            tx: Decoded transaction
            wallet: Wallet address

        Returns:
            BalanceDelta: Native delta (SOL), summed token delta, and reported mint
        """
        native_delta = native_balance_change(tx, wallet) - lamports_to_sol(tx.fee)

        changes = token_balance_changes(tx, wallet)
        token_delta = sum((difference for _, difference in changes), Decimal(0))
        token_mint = select_dominant_mint(changes, self.mint_policy)

        per_mint = net_by_mint(changes)
        if len(per_mint) > 1:
            logger.info(
                "%s touched %d mints, reporting %s (%s)",
                tx.signature,
                len(per_mint),
                token_mint,
                self.mint_policy.value,
            )

        kinds = scan_instruction_kinds(tx)
        logger.debug(
            "%s: SOL change %s, token change %s, instructions %s",
            tx.signature,
            native_delta,
            token_delta,
            {kind.value: count for kind, count in kinds.items()},
        )

        return BalanceDelta(
            native_delta=native_delta,
            token_delta=token_delta,
            token_mint=token_mint,
            token_deltas=per_mint,
            instruction_kinds=kinds,
        )


__all__ = [
    "BalanceDeltaExtractor",
    "MintSelectionPolicy",
    "classify_instruction",
    "native_balance_change",
    "net_by_mint",
    "scan_instruction_kinds",
    "select_dominant_mint",
    "token_balance_changes",
]

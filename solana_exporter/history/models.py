"""Pydantic models for decoded transactions, balance deltas and output records."""

from collections.abc import Iterator
from decimal import Decimal
from enum import StrEnum

from typing import Any, Self

import base58
from pydantic import BaseModel, ConfigDict, Field, model_validator

from solana_exporter.helpers.constants import MISSING_VALUE
from solana_exporter.helpers.parsers import (
    format_amount,
    is_negligible,
    parse_ui_token_amount,
)


class TransactionCategory(StrEnum):
    """Economic nature of a transaction from the wallet's point of view."""

    TOKEN_SWAP = "Token Swap"
    SOL_DEPOSIT = "SOL Deposit"
    SOL_WITHDRAWAL = "SOL Withdrawal"
    TOKEN_DEPOSIT = "Token Deposit"
    TOKEN_WITHDRAWAL = "Token Withdrawal"
    TOKEN_PURCHASE = "Token Purchase"
    UNKNOWN = "Unknown"


class InstructionKind(StrEnum):
    """Coarse instruction type, used for diagnostics only."""

    SYSTEM_TRANSFER = "system_transfer"
    TOKEN_TRANSFER = "token_transfer"
    OTHER = "other"


class TokenBalanceEntry(BaseModel):
    """One entry of a pre- or post-token-balance snapshot."""

    account_index: int = Field(..., description="Index into the account keys", alias="accountIndex")
    mint: str = Field(..., description="Token mint address")
    owner: str | None = Field(default=None, description="Owner of the token account")
    ui_amount: Decimal = Field(default=Decimal(0), description="Balance in display units")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _read_ui_token_amount(cls, data: Any) -> Any:
        if isinstance(data, dict) and "uiTokenAmount" in data:
            data = dict(data)
            ui_token_amount = data.pop("uiTokenAmount")
            if ui_token_amount is not None and not isinstance(ui_token_amount, dict):
                msg = f"uiTokenAmount must be an object, got {type(ui_token_amount).__name__}"
                raise ValueError(msg)
            data["ui_amount"] = parse_ui_token_amount(ui_token_amount)
        return data

    @property
    def key(self) -> tuple[int, str, str | None]:
        """Correlation key shared by the pre and post entry of one account."""
        return (self.account_index, self.mint, self.owner)


class Instruction(BaseModel):
    """Compiled instruction referencing the account-key table by index."""

    program_id_index: int = Field(..., alias="programIdIndex")
    accounts: list[int] = Field(default_factory=list)
    data: str = Field(default="", description="Base58 encoded payload")
    stack_height: int | None = Field(default=None, alias="stackHeight")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def program_id(self, account_keys: list[str]) -> str | None:
        """Resolve the program address, or None if the index is out of range."""
        if 0 <= self.program_id_index < len(account_keys):
            return account_keys[self.program_id_index]
        return None

    def payload(self) -> bytes | None:
        """Decode the payload bytes, or None if it is not valid base58."""
        try:
            return base58.b58decode(self.data)
        except ValueError:
            return None


class InnerInstructionGroup(BaseModel):
    """Instructions invoked by the top-level instruction at ``index``."""

    index: int
    instructions: list[Instruction] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class RawTransaction(BaseModel):
    """A decoded transaction with the status metadata the extractor needs."""

    signature: str
    block_time: int | None = None
    fee: int = 0
    account_keys: list[str]
    instructions: list[Instruction] = Field(default_factory=list)
    inner_instructions: list[InnerInstructionGroup] = Field(default_factory=list)
    pre_balances: list[int]
    post_balances: list[int]
    pre_token_balances: list[TokenBalanceEntry] | None = None
    post_token_balances: list[TokenBalanceEntry] | None = None
    err: Any = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_balance_arrays(self) -> Self:
        n_keys = len(self.account_keys)
        if len(self.pre_balances) != n_keys or len(self.post_balances) != n_keys:
            msg = (
                f"balance arrays ({len(self.pre_balances)}/{len(self.post_balances)}) "
                f"do not match {n_keys} account keys"
            )
            raise ValueError(msg)
        return self

    def wallet_indices(self, wallet: str) -> list[int]:
        """All positions of ``wallet`` in the account-key table."""
        return [i for i, key in enumerate(self.account_keys) if key == wallet]

    def iter_instructions(self) -> Iterator[Instruction]:
        """Top-level instructions, each followed by the ones it invoked."""
        inner_by_index: dict[int, list[Instruction]] = {}
        for group in self.inner_instructions:
            inner_by_index.setdefault(group.index, []).extend(group.instructions)

        for index, instruction in enumerate(self.instructions):
            yield instruction
            yield from inner_by_index.pop(index, [])

        # Groups pointing past the top-level list
        for index in sorted(inner_by_index):
            yield from inner_by_index[index]


class BalanceDelta(BaseModel):
    """Net effect of one transaction on the wallet."""

    native_delta: Decimal
    token_delta: Decimal
    token_mint: str | None = None
    token_deltas: dict[str, Decimal] = Field(default_factory=dict)
    instruction_kinds: dict[InstructionKind, int] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @property
    def is_empty(self) -> bool:
        """Whether neither balance moved."""
        return is_negligible(self.native_delta) and is_negligible(self.token_delta)


CSV_COLUMNS = (
    "date",
    "tx_hash",
    "tx_src",
    "tx_dest",
    "sent_amount",
    "sent_currency",
    "received_amount",
    "received_currency",
    "fee_amount",
    "fee_currency",
)

_OPTIONAL_AMOUNTS = ("sent_amount", "received_amount")
_OPTIONAL_LABELS = ("sent_currency", "received_currency")


class TransactionRecord(BaseModel):
    """One exported row. Immutable once built."""

    date: str
    tx_hash: str
    tx_src: str
    tx_dest: str
    sent_amount: Decimal | None = None
    sent_currency: str | None = None
    received_amount: Decimal | None = None
    received_currency: str | None = None
    fee_amount: Decimal
    fee_currency: str

    model_config = ConfigDict(frozen=True)

    def to_row(self) -> dict[str, str]:
        """Render every column as text, absent values as ``N/A``."""
        row: dict[str, str] = {}
        for column in CSV_COLUMNS:
            value = getattr(self, column)
            if value is None:
                row[column] = MISSING_VALUE
            elif isinstance(value, Decimal):
                row[column] = format_amount(value)
            else:
                row[column] = value
        return row

    @classmethod
    def from_row(cls, row: dict[str, str]) -> Self:
        """Parse a row written by ``to_row``."""
        values: dict[str, Any] = {column: row[column] for column in CSV_COLUMNS}
        for column in (*_OPTIONAL_AMOUNTS, *_OPTIONAL_LABELS):
            if values[column] == MISSING_VALUE:
                values[column] = None
        for column in (*_OPTIONAL_AMOUNTS, "fee_amount"):
            if values[column] is not None:
                values[column] = Decimal(values[column])
        return cls(**values)


__all__ = [
    "CSV_COLUMNS",
    "BalanceDelta",
    "InnerInstructionGroup",
    "Instruction",
    "InstructionKind",
    "RawTransaction",
    "TokenBalanceEntry",
    "TransactionCategory",
    "TransactionRecord",
]

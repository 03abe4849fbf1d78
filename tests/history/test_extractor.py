"""Tests for balance delta extraction."""

from decimal import Decimal

import pytest

from solana_exporter.helpers.constants import SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID
from solana_exporter.history.decoding import decode_transaction
from solana_exporter.history.extractor import (
    BalanceDeltaExtractor,
    MintSelectionPolicy,
    classify_instruction,
    native_balance_change,
    net_by_mint,
    scan_instruction_kinds,
    select_dominant_mint,
    token_balance_changes,
)
from solana_exporter.history.models import Instruction, InstructionKind, RawTransaction
from tests.factories import (
    BONK_MINT,
    COUNTERPARTY,
    USDC_MINT,
    WALLET,
    make_tx_payload,
    system_transfer_data,
    token_entry,
    token_transfer_data,
)


def swap_tx(**overrides: object) -> RawTransaction:
    """Wallet receives 200 USDC for 1.5 SOL."""
    values: dict[str, object] = {
        "pre_balances": [10_000_000_000, 0, 1],
        "post_balances": [8_500_000_000 - 5000, 0, 1],
        "pre_token_balances": [token_entry(1, USDC_MINT, WALLET, "0")],
        "post_token_balances": [token_entry(1, USDC_MINT, WALLET, "200")],
    }
    values.update(overrides)
    return decode_transaction("swap", make_tx_payload(**values))  # type: ignore[arg-type]


class TestNativeBalanceChange:
    """Tests for native_balance_change."""

    def test_change_in_sol(self, fee_only_tx: RawTransaction) -> None:
        """Test lamport differences are converted to SOL."""
        assert native_balance_change(fee_only_tx, WALLET) == Decimal("-0.000005")

    def test_absent_wallet(self, fee_only_tx: RawTransaction) -> None:
        """Test a wallet outside the key table has no change."""
        assert native_balance_change(fee_only_tx, "absent") == Decimal(0)

    def test_first_index_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test only the first position of a repeated wallet is used."""
        tx = decode_transaction(
            "dup",
            make_tx_payload(
                account_keys=[WALLET, COUNTERPARTY, WALLET],
                pre_balances=[1_000_000_000, 0, 0],
                post_balances=[2_000_000_000, 0, 5_000_000_000],
            ),
        )

        assert native_balance_change(tx, WALLET) == Decimal(1)
        assert "appears at 2 account indices" in caplog.text


class TestTokenBalanceChanges:
    """Tests for token_balance_changes."""

    def test_matched_entries(self) -> None:
        """Test pre and post entries of one account are diffed."""
        tx = swap_tx()

        assert token_balance_changes(tx, WALLET) == [(USDC_MINT, Decimal(200))]

    def test_other_owners_ignored(self) -> None:
        """Test token accounts of other owners do not count."""
        tx = swap_tx(
            pre_token_balances=[token_entry(1, USDC_MINT, COUNTERPARTY, "500")],
            post_token_balances=[token_entry(1, USDC_MINT, COUNTERPARTY, "300")],
        )

        assert token_balance_changes(tx, WALLET) == []

    def test_order_insensitive(self) -> None:
        """Test snapshot order does not change the result."""
        pre = [
            token_entry(1, USDC_MINT, WALLET, "10"),
            token_entry(2, BONK_MINT, WALLET, "1000"),
        ]
        post = [
            token_entry(2, BONK_MINT, WALLET, "400"),
            token_entry(1, USDC_MINT, WALLET, "15"),
        ]
        forward = swap_tx(pre_token_balances=pre, post_token_balances=post)
        reversed_ = swap_tx(pre_token_balances=pre[::-1], post_token_balances=post[::-1])

        expected = {USDC_MINT: Decimal(5), BONK_MINT: Decimal(-600)}
        assert dict(token_balance_changes(forward, WALLET)) == expected
        assert dict(token_balance_changes(reversed_, WALLET)) == expected

    def test_account_opened(self) -> None:
        """Test an account only in the post snapshot starts from zero."""
        tx = swap_tx(
            pre_token_balances=[],
            post_token_balances=[token_entry(4, BONK_MINT, WALLET, "7")],
        )

        assert token_balance_changes(tx, WALLET) == [(BONK_MINT, Decimal(7))]

    def test_account_closed(self) -> None:
        """Test an account only in the pre snapshot ends at zero."""
        tx = swap_tx(
            pre_token_balances=[token_entry(4, BONK_MINT, WALLET, "7")],
            post_token_balances=[],
        )

        assert token_balance_changes(tx, WALLET) == [(BONK_MINT, Decimal(-7))]

    def test_missing_snapshot(self) -> None:
        """Test a missing snapshot list yields no token changes."""
        payload = make_tx_payload(post_token_balances=[token_entry(1, USDC_MINT, WALLET, "1")])
        del payload["meta"]["preTokenBalances"]
        tx = decode_transaction("nopre", payload)

        assert token_balance_changes(tx, WALLET) == []

    def test_unchanged_accounts_dropped(self) -> None:
        """Test accounts with equal balances are left out."""
        tx = swap_tx(
            pre_token_balances=[token_entry(1, USDC_MINT, WALLET, "3")],
            post_token_balances=[token_entry(1, USDC_MINT, WALLET, "3.000000")],
        )

        assert token_balance_changes(tx, WALLET) == []


class TestSelectDominantMint:
    """Tests for select_dominant_mint and net_by_mint."""

    changes = [
        (USDC_MINT, Decimal(5)),
        (BONK_MINT, Decimal(-600)),
        (USDC_MINT, Decimal(1)),
    ]

    def test_largest_absolute(self) -> None:
        """Test the mint with the largest net movement is picked."""
        assert select_dominant_mint(self.changes) == BONK_MINT

    def test_last_non_zero(self) -> None:
        """Test the last changed account's mint is picked."""
        assert select_dominant_mint(self.changes, MintSelectionPolicy.LAST_NON_ZERO) == USDC_MINT

    def test_tie_goes_to_later_mint(self) -> None:
        """Test ties under the largest policy go to the later mint."""
        changes = [(USDC_MINT, Decimal(2)), (BONK_MINT, Decimal(-2))]

        assert select_dominant_mint(changes) == BONK_MINT

    def test_no_changes(self) -> None:
        """Test no changes select no mint."""
        assert select_dominant_mint([]) is None

    def test_net_by_mint(self) -> None:
        """Test account changes are summed per mint."""
        assert net_by_mint(self.changes) == {USDC_MINT: Decimal(6), BONK_MINT: Decimal(-600)}


class TestInstructionKinds:
    """Tests for classify_instruction and scan_instruction_kinds."""

    keys = [WALLET, COUNTERPARTY, SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID]

    def test_system_transfer(self) -> None:
        """Test System Program transfers are recognised."""
        instruction = Instruction(program_id_index=2, data=system_transfer_data(1))

        assert classify_instruction(instruction, self.keys) is InstructionKind.SYSTEM_TRANSFER

    def test_token_transfer(self) -> None:
        """Test SPL Token transfers are recognised."""
        instruction = Instruction(program_id_index=3, data=token_transfer_data(1))

        assert classify_instruction(instruction, self.keys) is InstructionKind.TOKEN_TRANSFER

    def test_other_program(self) -> None:
        """Test unrelated programs classify as other."""
        instruction = Instruction(program_id_index=1, data=token_transfer_data(1))

        assert classify_instruction(instruction, self.keys) is InstructionKind.OTHER

    def test_empty_payload(self) -> None:
        """Test an empty payload classifies as other."""
        instruction = Instruction(program_id_index=2, data="")

        assert classify_instruction(instruction, self.keys) is InstructionKind.OTHER

    def test_scan_counts_inner_instructions(self) -> None:
        """Test inner instructions are counted too."""
        system = {"programIdIndex": 2, "accounts": [0, 1], "data": system_transfer_data(5)}
        token = {"programIdIndex": 3, "accounts": [0, 1], "data": token_transfer_data(5)}
        tx = decode_transaction(
            "kinds",
            make_tx_payload(
                account_keys=self.keys,
                pre_balances=[0, 0, 1, 1],
                post_balances=[0, 0, 1, 1],
                instructions=[system],
                inner_instructions=[{"index": 0, "instructions": [token, token]}],
            ),
        )

        assert scan_instruction_kinds(tx) == {
            InstructionKind.SYSTEM_TRANSFER: 1,
            InstructionKind.TOKEN_TRANSFER: 2,
        }


class TestBalanceDeltaExtractor:
    """Tests for BalanceDeltaExtractor.extract."""

    def test_fee_subtracted(self, fee_only_tx: RawTransaction) -> None:
        """Test the fee is subtracted from the balance change."""
        delta = BalanceDeltaExtractor().extract(fee_only_tx, WALLET)

        assert delta.native_delta == Decimal("-0.00001")
        assert delta.token_delta == Decimal(0)
        assert delta.token_mint is None

    def test_fee_subtracted_when_wallet_did_not_pay(self) -> None:
        """Test the fee is subtracted even for transactions paid by others."""
        tx = decode_transaction(
            "incoming",
            make_tx_payload(
                account_keys=[COUNTERPARTY, WALLET, SYSTEM_PROGRAM_ID],
                pre_balances=[5_000_000_000, 0, 1],
                post_balances=[4_000_000_000 - 5000, 1_000_000_000, 1],
            ),
        )

        delta = BalanceDeltaExtractor().extract(tx, WALLET)

        assert delta.native_delta == Decimal("0.999995")

    def test_swap(self) -> None:
        """Test a SOL for token swap yields both deltas."""
        delta = BalanceDeltaExtractor().extract(swap_tx(), WALLET)

        assert delta.native_delta == Decimal("-1.50001")
        assert delta.token_delta == Decimal(200)
        assert delta.token_mint == USDC_MINT
        assert delta.token_deltas == {USDC_MINT: Decimal(200)}

    def test_token_delta_sums_all_mints(self) -> None:
        """Test the token delta sums every mint while one mint is reported."""
        tx = swap_tx(
            pre_token_balances=[
                token_entry(1, USDC_MINT, WALLET, "10"),
                token_entry(2, BONK_MINT, WALLET, "100"),
            ],
            post_token_balances=[
                token_entry(1, USDC_MINT, WALLET, "15"),
                token_entry(2, BONK_MINT, WALLET, "40"),
            ],
        )

        delta = BalanceDeltaExtractor(MintSelectionPolicy.LAST_NON_ZERO).extract(tx, WALLET)

        assert delta.token_delta == Decimal(-55)
        assert delta.token_mint == BONK_MINT

    def test_absent_wallet_still_pays_fee(self, fee_only_tx: RawTransaction) -> None:
        """Test a wallet outside the key table is charged only the fee."""
        delta = BalanceDeltaExtractor().extract(fee_only_tx, "absent")

        assert delta.native_delta == Decimal("-0.000005")

"""Sequential per-signature export pipeline."""

from collections.abc import Sequence

import httpx
from rich.console import Console

from solana_exporter.errors import (
    LedgerInitializationError,
    TransactionParseError,
    TransportError,
)
from solana_exporter.helpers.logging import get_logger
from solana_exporter.helpers.progress import track_signatures
from solana_exporter.helpers.rpc import SolanaRPCClient
from solana_exporter.helpers.rpc_models import SignatureInfo
from solana_exporter.history.classifier import classify_delta
from solana_exporter.history.decoding import decode_transaction
from solana_exporter.history.extractor import BalanceDeltaExtractor
from solana_exporter.history.models import TransactionRecord
from solana_exporter.history.records import RecordBuilder
from solana_exporter.history.symbols import SymbolResolver


logger = get_logger(__name__)


class BatchOrchestrator:
    """Fetch, extract, classify and build records for a wallet, one signature at a time.

    Every network call is awaited before the next signature starts. Per
    signature failures (transport, decoding) are logged and the signature is
    skipped; the batch always continues.
    """

    def __init__(
        self,
        rpc_client: SolanaRPCClient,
        http_client: httpx.AsyncClient,
        wallet: str,
        *,
        extractor: BalanceDeltaExtractor | None = None,
        record_builder: RecordBuilder | None = None,
        console: Console | None = None,
        show_progress: bool = True,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            rpc_client: Ledger client
            http_client: Shared HTTP client for every round trip
            wallet: Wallet address whose history is exported
            extractor: Balance delta extractor (default policy if None)
            record_builder: Record builder (resolves symbols over RPC if None)
            console: Rich console for the progress bar
            show_progress: Whether to render a progress bar
        """
        self.rpc_client = rpc_client
        self.http_client = http_client
        self.wallet = wallet
        self.extractor = extractor or BalanceDeltaExtractor()
        self.record_builder = record_builder or RecordBuilder(
            SymbolResolver(rpc_client, http_client)
        )
        self.console = console
        self.show_progress = show_progress

    async def process_signature(self, signature: str) -> TransactionRecord | None:
        """Run the pipeline for one signature.

        Args:
            signature: Base58 transaction signature

        Returns:
            The record, or None if the transaction was skipped or had no effect
        """
        try:
            payload = await self.rpc_client.get_transaction(self.http_client, signature)
        except (TransportError, httpx.HTTPError) as e:
            logger.error("TX download error for %s: %s", signature, e)
            return None

        try:
            tx = decode_transaction(signature, payload)
            delta = self.extractor.extract(tx, self.wallet)
        except TransactionParseError as e:
            logger.error("Error processing transaction %s: %s", signature, e)
            return None

        if delta.is_empty:
            logger.debug("Skipping %s: no relevant activity", signature)
            return None

        category = classify_delta(delta)
        return await self.record_builder.build(tx, delta, category)

    async def run(
        self,
        signatures: Sequence[str],
        operation_limit: int = 0,
    ) -> list[TransactionRecord]:
        """Process signatures in order until they or the operation limit run out.

        Args:
            signatures: Signatures in ledger order (newest first)
            operation_limit: Maximum number of signatures to process, 0 for all

        Returns:
            Emitted records, in the order of their signatures

        Raises:
            ValueError: If operation_limit is negative
        """
        if operation_limit < 0:
            msg = "operation_limit must not be negative"
            raise ValueError(msg)

        total = len(signatures)
        if operation_limit:
            total = min(total, operation_limit)

        records: list[TransactionRecord] = []
        processed = 0

        with track_signatures(
            "Processing signatures", total, self.console, enabled=self.show_progress
        ) as advance:
            for signature in signatures:
                record = await self.process_signature(signature)
                if record is not None:
                    records.append(record)

                processed += 1
                advance(len(records))
                logger.info("Processed: %d/%d", processed, total)

                if operation_limit and processed >= operation_limit:
                    logger.info("Limit reached - operation processing finished")
                    break

        return records

    async def list_signatures(self, operation_limit: int = 0) -> list[SignatureInfo]:
        """Enumerate the wallet's signatures, newest first.

        Raises:
            LedgerInitializationError: If the signatures cannot be listed
        """
        try:
            signatures = await self.rpc_client.list_signatures(
                self.http_client, self.wallet, operation_limit or None
            )
        except (TransportError, httpx.HTTPError) as e:
            msg = f"Failed to fetch signatures for {self.wallet}: {e}"
            raise LedgerInitializationError(msg) from e

        logger.info("Number of signatures: %d", len(signatures))
        return signatures

    async def export(self, operation_limit: int = 0) -> list[TransactionRecord]:
        """List the wallet's signatures and process them.

        Args:
            operation_limit: Maximum number of signatures to process, 0 for all

        Returns:
            Emitted records, newest first

        Raises:
            LedgerInitializationError: If the signatures cannot be listed
        """
        signatures = await self.list_signatures(operation_limit)
        return await self.run([info.signature for info in signatures], operation_limit)


__all__ = ["BatchOrchestrator"]

"""Exception hierarchy for the exporter.

Only ``InvalidAddressError`` and ``LedgerInitializationError`` abort a run.
Everything else is per-signature or per-mint: it is logged and the affected
transaction is skipped, or the symbol falls back to a placeholder.
"""


class ExporterError(Exception):
    """Base class for all exporter errors."""


class InvalidAddressError(ExporterError):
    """The wallet address is missing or not a valid base58 public key."""


class TransportError(ExporterError):
    """A ledger round trip failed or returned nothing usable."""


class RPCError(TransportError):
    """The JSON-RPC endpoint answered with an error object."""

    def __init__(self, method: str, error: object) -> None:
        self.method = method
        self.error = error
        super().__init__(f"RPC error from {method}: {error}")


class LedgerInitializationError(ExporterError):
    """Signature enumeration failed, so there is nothing to process."""


class TransactionParseError(ExporterError):
    """A fetched transaction cannot be turned into balance deltas."""


class UnsupportedEncodingError(TransactionParseError):
    """The transaction payload is not in the raw JSON encoding."""


class MissingMetadataError(TransactionParseError):
    """The transaction status metadata is absent or incomplete."""


class SymbolResolutionError(ExporterError):
    """A token metadata account is absent or malformed."""


__all__ = [
    "ExporterError",
    "InvalidAddressError",
    "LedgerInitializationError",
    "MissingMetadataError",
    "RPCError",
    "SymbolResolutionError",
    "TransactionParseError",
    "TransportError",
    "UnsupportedEncodingError",
]

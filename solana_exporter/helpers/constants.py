"""Common configuration constants used across the application."""

from decimal import Decimal


# Ledger Units
LAMPORTS_PER_SOL = 1_000_000_000
"""Number of lamports in one SOL"""

NATIVE_CURRENCY = "SOL"
"""Display label of the native currency"""

NEGLIGIBLE_AMOUNT = Decimal("1e-12")
"""Deltas with a smaller magnitude are treated as zero"""

# Program Identifiers
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
"""Native System Program"""

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
"""SPL Token Program"""

TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
"""SPL Token-2022 Program"""

METADATA_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
"""Metaplex Token Metadata Program"""

# Output Sentinels
MISSING_VALUE = "N/A"
"""Rendered in place of absent optional fields"""

UNKNOWN_TOKEN_SYMBOL = "Unknown SPL Token"
"""Currency label used when a mint symbol cannot be resolved"""

DEFAULT_OUTPUT_FILE = "transactions.csv"
"""Default CSV file name"""

# RPC Constants
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
"""Public mainnet-beta JSON-RPC endpoint"""

DEFAULT_COMMITMENT = "confirmed"
"""Commitment level for transaction queries"""

DEFAULT_ENCODING = "json"
"""Transaction encoding requested from getTransaction"""

MAX_SUPPORTED_TRANSACTION_VERSION = 0
"""Highest transaction version the decoder understands"""

SIGNATURES_PAGE_SIZE = 1000
"""Maximum page size accepted by getSignaturesForAddress"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of retry attempts"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""


__all__ = [
    "DEFAULT_COMMITMENT",
    "DEFAULT_ENCODING",
    "DEFAULT_OUTPUT_FILE",
    "DEFAULT_RPC_URL",
    "DEFAULT_TIMEOUT",
    "LAMPORTS_PER_SOL",
    "MAX_RETRIES",
    "MAX_SUPPORTED_TRANSACTION_VERSION",
    "METADATA_PROGRAM_ID",
    "MISSING_VALUE",
    "NATIVE_CURRENCY",
    "NEGLIGIBLE_AMOUNT",
    "RETRY_BASE_DELAY",
    "RETRY_MAX_DELAY",
    "SIGNATURES_PAGE_SIZE",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_2022_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "UNKNOWN_TOKEN_SYMBOL",
]

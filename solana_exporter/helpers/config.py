"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv

from solana_exporter.helpers.constants import DEFAULT_OUTPUT_FILE, DEFAULT_RPC_URL


# Load environment variables from .env file
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from solana_exporter.helpers.config import get_optional_env

        output = get_optional_env("EXPORT_OUTPUT", "transactions.csv")
        ```
    """
    value = os.getenv(key)
    if not value:
        return default
    return value


def get_solana_rpc_url(rpc_url: str | None = None) -> str:
    """Get Solana RPC URL from parameter, environment, or the public default.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Solana JSON-RPC endpoint URL

    Example:
        ```python
        from solana_exporter.helpers.config import get_solana_rpc_url

        # Get from environment (falls back to mainnet-beta)
        rpc_url = get_solana_rpc_url()

        # Or provide explicitly
        rpc_url = get_solana_rpc_url("https://api.devnet.solana.com")
        ```
    """
    if rpc_url:
        return rpc_url
    return get_optional_env("SOLANA_RPC_URL", DEFAULT_RPC_URL) or DEFAULT_RPC_URL


def get_log_level(log_level: str | None = None) -> str:
    """Get the log level name from parameter or LOG_LEVEL, upper-cased."""
    level = log_level or get_optional_env("LOG_LEVEL", "INFO") or "INFO"
    return level.upper()


def get_log_color() -> bool:
    """Whether LOG_COLOR asks for colored log output."""
    value = get_optional_env("LOG_COLOR", "")
    return bool(value) and value.strip().lower() in _TRUTHY


def get_output_path(output: str | None = None) -> str:
    """Get the CSV output path from parameter or EXPORT_OUTPUT."""
    if output:
        return output
    return get_optional_env("EXPORT_OUTPUT", DEFAULT_OUTPUT_FILE) or DEFAULT_OUTPUT_FILE


__all__ = [
    "get_log_color",
    "get_log_level",
    "get_optional_env",
    "get_output_path",
    "get_solana_rpc_url",
]

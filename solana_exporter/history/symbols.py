"""Token symbol resolution through Metaplex metadata accounts."""

import struct

import httpx
from solders.pubkey import Pubkey

from solana_exporter.errors import SymbolResolutionError, TransportError
from solana_exporter.helpers.constants import METADATA_PROGRAM_ID
from solana_exporter.helpers.logging import get_logger
from solana_exporter.helpers.rpc import SolanaRPCClient


logger = get_logger(__name__)

METADATA_SEED = b"metadata"

# Metadata account layout: key (u8), update authority, mint, then borsh strings
METADATA_V1_KEY = 4
_STRINGS_OFFSET = 1 + 32 + 32


def derive_metadata_address(mint: str, program_id: str = METADATA_PROGRAM_ID) -> str:
    """Derive the metadata PDA of a mint.

    Seeds are ``["metadata", program_id, mint]`` under the metadata program.

    Args:
        mint: Base58 mint address
        program_id: Metadata program address

    Returns:
        str: Base58 metadata account address

    Raises:
        SymbolResolutionError: If the mint or program id is not a valid address
    """
    try:
        program = Pubkey.from_string(program_id)
        mint_key = Pubkey.from_string(mint)
    except ValueError as e:
        msg = f"Invalid mint address: {mint}"
        raise SymbolResolutionError(msg) from e

    address, _bump = Pubkey.find_program_address(
        [METADATA_SEED, bytes(program), bytes(mint_key)], program
    )
    return str(address)


def _read_borsh_string(data: bytes, offset: int) -> tuple[str, int]:
    if offset + 4 > len(data):
        msg = "Metadata account truncated"
        raise SymbolResolutionError(msg)
    (length,) = struct.unpack_from("<I", data, offset)
    start = offset + 4
    end = start + length
    if end > len(data):
        msg = "Metadata string runs past the end of the account"
        raise SymbolResolutionError(msg)
    return data[start:end].decode("utf-8", errors="ignore"), end


def decode_metadata_symbol(data: bytes) -> str:
    """Read the symbol out of a Metaplex metadata account.

    Args:
        data: Raw account data

    Returns:
        str: Symbol with NUL padding and whitespace stripped

    Raises:
        SymbolResolutionError: If the account is not a metadata account or is truncated
    """
    if not data or data[0] != METADATA_V1_KEY:
        msg = "Not a metadata account"
        raise SymbolResolutionError(msg)

    _name, offset = _read_borsh_string(data, _STRINGS_OFFSET)
    symbol, _ = _read_borsh_string(data, offset)
    return symbol.replace("\x00", "").strip()


class SymbolResolver:
    """Resolve mint addresses to display symbols, caching per mint.

    Failures are cached as None too, so a broken mint costs one round trip
    per export.
    """

    def __init__(
        self,
        rpc_client: SolanaRPCClient,
        http_client: httpx.AsyncClient,
        program_id: str = METADATA_PROGRAM_ID,
    ) -> None:
        self.rpc_client = rpc_client
        self.http_client = http_client
        self.program_id = program_id
        self._cache: dict[str, str | None] = {}

    async def resolve(self, mint: str) -> str | None:
        """Look up the symbol of ``mint``.

        Args:
            mint: Base58 mint address

        Returns:
            The symbol, or None if the metadata account is absent, malformed,
            empty, or could not be fetched
        """
        if mint in self._cache:
            return self._cache[mint]

        symbol: str | None = None
        try:
            address = derive_metadata_address(mint, self.program_id)
            data = await self.rpc_client.get_account_info(self.http_client, address)
            if data is None:
                logger.info("No metadata account for %s", mint)
            else:
                symbol = decode_metadata_symbol(data) or None
        except (SymbolResolutionError, TransportError, httpx.HTTPError) as e:
            logger.warning("Symbol lookup failed for %s: %s", mint, e)

        self._cache[mint] = symbol
        return symbol


__all__ = [
    "SymbolResolver",
    "decode_metadata_symbol",
    "derive_metadata_address",
]

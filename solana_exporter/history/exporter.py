"""CSV persistence of transaction records."""

import csv
from collections.abc import Sequence
from pathlib import Path

from solana_exporter.helpers.logging import get_logger
from solana_exporter.history.models import CSV_COLUMNS, TransactionRecord


logger = get_logger(__name__)


def write_records_csv(
    records: Sequence[TransactionRecord], output: str | Path
) -> Path | None:
    """Write records to a CSV file, one header row then one row per record.

    Nothing is written, and no file is created, when there are no records.

    Args:
        records: Records in processed order
        output: Destination path

    Returns:
        The written path, or None if there was nothing to write
    """
    if not records:
        logger.info("No transactions to export, %s not written", output)
        return None

    path = Path(output)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(CSV_COLUMNS))
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_row())

    logger.info("Transactions successfully saved to %s (%d rows)", path, len(records))
    return path


def read_records_csv(path: str | Path) -> list[TransactionRecord]:
    """Read a file written by write_records_csv back into records.

    Args:
        path: CSV file path

    Returns:
        Records in file order, ``N/A`` fields as None

    Raises:
        ValueError: If the header does not match the export columns
    """
    with Path(path).open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if tuple(reader.fieldnames or ()) != CSV_COLUMNS:
            msg = f"Unexpected CSV header in {path}: {reader.fieldnames}"
            raise ValueError(msg)
        return [TransactionRecord.from_row(row) for row in reader]


__all__ = ["read_records_csv", "write_records_csv"]

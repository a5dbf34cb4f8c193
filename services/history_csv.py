"""
services/history_csv.py
-----------------------
CSV import/export of dated history rows (account balances, plan premiums).

Import format: ``Date,<number>...,Notes`` with an optional header row
(detected by the word 'date' in the first line). Rows whose date is not
``YYYY-MM-DD`` are skipped and counted; unparseable numbers become 0.
"""

import csv
import io
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence, Union

import pandas as pd

from utils.dates import is_iso_date
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ParsedRow:
    date: date
    values: list[float]
    notes: str = ""


@dataclass
class ImportResult:
    """Counts reported back to the user after an import."""
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    rows: list[ParsedRow] = field(default_factory=list)


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def parse_history_csv(text: str, value_columns: int) -> ImportResult:
    """
    Parse pasted CSV text.

    Args:
        text: Raw CSV content.
        value_columns: How many numeric columns follow the date.

    Returns:
        An ImportResult whose ``rows`` hold the valid rows and whose
        ``skipped`` counts the rejected ones. ``imported`` is left at 0 for
        the caller to fill in once rows are stored.
    """
    lines = text.strip().splitlines()
    if lines and "date" in lines[0].lower():
        lines = lines[1:]

    result = ImportResult()
    for fields in csv.reader(line.strip() for line in lines if line.strip()):
        fields = [f.strip() for f in fields]
        if len(fields) < 1 + value_columns or not is_iso_date(fields[0]):
            result.skipped += 1
            continue
        values = [_to_float(f) for f in fields[1:1 + value_columns]]
        notes = fields[1 + value_columns] if len(fields) > 1 + value_columns else ""
        result.rows.append(ParsedRow(date.fromisoformat(fields[0]), values, notes))

    logger.info(f"Parsed {len(result.rows)} history rows, skipped {result.skipped}")
    return result


def _plain_number(value) -> Union[int, float]:
    # ints keep the csv writer from printing '150000.0'
    number = float(value)
    return int(number) if number.is_integer() else number


def export_history_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> bytes:
    """
    Render rows as CSV: text cells (header, date, notes) quoted, numbers bare,
    rows joined by '\\n' with no trailing newline. The output reads back
    through `parse_history_csv`.

    Args:
        headers: Header names, e.g. ('Date', 'Balance', 'Notes').
        rows: (date, number..., notes) tuples.
    """
    records = []
    for entry_date, *numbers, notes in rows:
        records.append([entry_date.isoformat(), *(_plain_number(n) for n in numbers), notes or ""])

    # object dtype keeps each number an int/float so QUOTE_NONNUMERIC leaves it bare
    df = pd.DataFrame(records, columns=list(headers), dtype=object)
    buffer = io.StringIO()
    df.to_csv(buffer, index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    logger.info(f"Exported {len(records)} history rows as CSV")
    return buffer.getvalue().rstrip("\n").encode("utf-8")

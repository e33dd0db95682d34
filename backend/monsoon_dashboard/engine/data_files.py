"""
Readers for the bundled dataset files (CSV and JSON).

All I/O failures surface as SourceUnavailableError so callers can fall back
to another source or report the dataset as unavailable.
"""

import csv
import io
import json
import logging
import os

logger = logging.getLogger(__name__)


class SourceUnavailableError(Exception):
    """A data file is missing, unreadable, or holds no usable data."""


def read_text_file(path: str) -> str:
    """Read a UTF-8 text file, replacing undecodable bytes."""
    if not os.path.exists(path):
        raise SourceUnavailableError(f"Data file not found: {os.path.basename(path)}")
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise SourceUnavailableError(f"Could not read {os.path.basename(path)}: {e}") from e


def read_csv_rows(path: str) -> list[dict[str, str]]:
    """
    Parse a headered CSV file into a list of row dicts.

    Blank lines are skipped and header/cell whitespace is stripped.
    """
    content = read_text_file(path)
    reader = csv.DictReader(io.StringIO(content))
    if reader.fieldnames is None:
        raise SourceUnavailableError(f"{os.path.basename(path)} has no header row.")
    reader.fieldnames = [h.strip() for h in reader.fieldnames]

    rows = []
    for row in reader:
        cleaned = {
            k: (v.strip() if isinstance(v, str) else "")
            for k, v in row.items()
            if k is not None
        }
        if not any(cleaned.values()):
            continue
        rows.append(cleaned)

    logger.debug("Read %d rows from %s", len(rows), path)
    return rows


def read_json_file(path: str):
    """Load a JSON document from disk."""
    content = read_text_file(path)
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise SourceUnavailableError(
            f"{os.path.basename(path)} is not valid JSON: {e}"
        ) from e

"""CSV writer for extracted tutor records.

Writes the whole batch in one go with a fixed header; an existing file is
overwritten. Unicode is written as UTF-8.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from tutorscout.common.exceptions import WriteError
from tutorscout.data_types import CSV_COLUMNS, TutorRecord


def write_records_csv(records: Iterable[TutorRecord], path: Path) -> int:
    """Write *records* to *path* and return the number of rows written.

    Raises:
        WriteError: If the file cannot be opened or written.
    """
    count = 0
    try:
        with open(path, "w", newline="", encoding="utf-8") as csvfile:
            writer = csv.DictWriter(
                csvfile, fieldnames=list(CSV_COLUMNS.values())
            )
            writer.writeheader()
            for record in records:
                writer.writerow(record.as_row())
                count += 1
    except OSError as e:
        raise WriteError(str(path)) from e
    return count

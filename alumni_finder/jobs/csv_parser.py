"""Parse an uploaded CSV batch into (name, school) entries."""

import csv
import io
from typing import List

from alumni_finder.errors import BatchValidationError
from alumni_finder.jobs.models import MAX_FILE_BATCH, InputName

MAX_FILE_BYTES = 5 * 1024 * 1024


def parse_batch_file(filename: str, content: bytes) -> List[InputName]:
    """Read ``Name`` and ``School`` columns from a CSV upload.

    Header matching is case-insensitive, blank lines are skipped and any row
    with an empty cell rejects the whole file.
    """
    if len(content) > MAX_FILE_BYTES:
        raise BatchValidationError("File size exceeds 5MB limit")

    lowered = (filename or "").lower()
    if lowered.endswith((".xlsx", ".xls")):
        raise BatchValidationError("Excel files are not supported. Please convert to CSV format.")
    if not lowered.endswith(".csv"):
        raise BatchValidationError("Please upload a CSV file")

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise BatchValidationError("File must be UTF-8 encoded text") from e

    rows = [row for row in csv.reader(io.StringIO(text.strip()))]
    if len(rows) < 2:
        raise BatchValidationError("CSV file must have headers and at least one data row")

    headers = [h.strip().lower() for h in rows[0]]
    if "name" not in headers or "school" not in headers:
        raise BatchValidationError("Missing required 'Name' or 'School' column")
    name_index = headers.index("name")
    school_index = headers.index("school")

    entries: List[InputName] = []
    for line_no, row in enumerate(rows[1:], start=2):
        if not any(cell.strip() for cell in row):
            continue
        name = row[name_index].strip() if name_index < len(row) else ""
        school = row[school_index].strip() if school_index < len(row) else ""
        if not name or not school:
            raise BatchValidationError(
                f"Row {line_no} has empty Name or School cell", {"row": line_no}
            )
        entries.append(InputName(name=name, school=school))

    if not entries:
        raise BatchValidationError("No valid rows found in file")
    if len(entries) > MAX_FILE_BATCH:
        raise BatchValidationError(
            f"Maximum {MAX_FILE_BATCH} names allowed. Your file has {len(entries)}"
        )
    return entries

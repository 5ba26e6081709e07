"""
CSV helpers shared by every import/export endpoint.

Exports quote every field, write dates as ISO-8601 and ``None`` as an empty
field, start with a UTF-8 BOM and join rows with ``\\n``. Imports are keyed
by the header row and report problems through ``on_error`` rather than
raising.
"""
import csv
import io
import logging
from datetime import date, datetime

logger = logging.getLogger(__name__)

BOM = "\ufeff"

ERROR_TOO_SHORT = "CSV file must have a header row and at least one data row."
ERROR_PARSE = "Failed to parse the CSV file. Please check the format."


def _format_value(value):
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _write_rows(rows):
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def export_to_csv(data, columns):
    """
    Render ``data`` (dicts or objects) as CSV text.

    ``columns`` is a list of ``(key, label)`` pairs; labels form the header.
    """
    rows = [[label for _, label in columns]]
    for item in data:
        row = []
        for key, _ in columns:
            value = item.get(key) if isinstance(item, dict) else getattr(item, key, None)
            row.append(_format_value(value))
        rows.append(row)
    return BOM + _write_rows(rows).rstrip("\n")


def build_csv_template(columns):
    """Header-only CSV for users to fill in."""
    return BOM + _write_rows([[label for _, label in columns]])


def parse_csv_line(line):
    return next(csv.reader([line]))


def import_from_csv(content, on_data, on_error=None):
    """
    Parse CSV ``content`` into dicts keyed by the trimmed header names and
    hand them to ``on_data``. Returns the rows, or ``None`` after reporting
    an error to ``on_error``.
    """
    def report(message):
        logger.info("CSV import rejected: %s", message)
        if on_error is not None:
            on_error(message)

    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8")
        if content.startswith(BOM):
            content = content[len(BOM):]

        lines = [line.strip() for line in content.splitlines()]
        lines = [line for line in lines if line]
        if len(lines) < 2:
            report(ERROR_TOO_SHORT)
            return None

        headers = [header.strip() for header in parse_csv_line(lines[0])]
        rows = []
        for line in lines[1:]:
            values = parse_csv_line(line)
            rows.append({
                header: (values[index] if index < len(values) else "").strip()
                for index, header in enumerate(headers)
            })
    except (csv.Error, UnicodeDecodeError, StopIteration):
        report(ERROR_PARSE)
        return None

    on_data(rows)
    return rows

"""
Name handling for substations and uploaded documents.

Report authors write the substation either with or without the
"สถานีไฟฟ้า" ("substation") prefix; both forms must land in the same Drive
folder and produce the same file name.
"""
from __future__ import annotations

import re

from repair.models import RepairReport

SUBSTATION_PREFIX = "สถานีไฟฟ้า"
UNKNOWN_SUBSTATION = "Unknown"
DEFAULT_EXTENSION = ".pdf"
FALLBACK_FILENAME = "upload"

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')


def strip_substation_prefix(value: str) -> str:
    """Trim and remove a leading "สถานีไฟฟ้า" token."""
    text = (value or "").strip()
    if text.startswith(SUBSTATION_PREFIX):
        text = text[len(SUBSTATION_PREFIX):].strip()
    return text


def normalize_group_key(value: str) -> str:
    """Folder name for a substation; empty input maps to "Unknown"."""
    return strip_substation_prefix(value) or UNKNOWN_SUBSTATION


def escape_drive_query_value(value: str) -> str:
    """Escape a literal for use inside single quotes in a Drive `q` filter."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def sanitize(value: str) -> str:
    return _UNSAFE_CHARS.sub("", value or "").strip()


def sanitize_doc_number(value: str) -> str:
    # 123/2567 and 1232/567 must not collapse into the same name
    return sanitize((value or "").strip().replace("/", "-"))


def repair_filename_encoding(name: str) -> str:
    """
    Undo UTF-8 bytes that were decoded as latin-1 by upload middleware.

    Names that are not such mojibake (plain ASCII, or already-correct
    non-latin text) are returned unchanged.
    """
    if not name:
        return name
    try:
        return name.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        return name


def compute_filename(report: RepairReport, original_name: str) -> str:
    """
    Canonical Drive file name for a report's attachment.

    With a document number: ``<doc>_<substation>.pdf``. Without one the
    uploaded name is kept, after repairing its encoding.
    """
    doc_number = sanitize_doc_number(report.doc_number)
    if doc_number:
        substation = sanitize(strip_substation_prefix(report.substation))
        return f"{doc_number}_{substation}{DEFAULT_EXTENSION}"

    return repair_filename_encoding(original_name or "") or FALLBACK_FILENAME

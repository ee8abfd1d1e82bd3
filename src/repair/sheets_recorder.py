"""
Google Sheets Integration
Appends one repair report row to the first tab of the shared spreadsheet
"""
from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from gspread.utils import absolute_range_name

from repair.errors import RecorderFailure
from repair.models import RepairReport

DEFAULT_SHEET_NAME = "Sheet1"
BUDDHIST_ERA_OFFSET = 543

# Positional layout, no header matching
SHEET_COLUMNS = [
    'Timestamp',
    'Substation',
    'Doc_Number',
    'Equipment_ID',
    'Details',
    'Details_AI',
    'Responsible',
    'Status',
    'Signed_Date',
    'File_Link',
]
SHEET_COLUMNS_V1 = [col for col in SHEET_COLUMNS if col != 'Details_AI']


def get_column_letter(col_num):
    """
    Convert column number to Excel-style column letter
    1 -> A, 26 -> Z, 27 -> AA, etc.
    """
    result = ""
    while col_num > 0:
        col_num -= 1
        result = chr(col_num % 26 + 65) + result
        col_num //= 26
    return result


def format_thai_timestamp(now: datetime) -> str:
    """Format like th-TH locale strings: d/m/BBBB HH:MM:SS, Buddhist-era year."""
    return (
        f"{now.day}/{now.month}/{now.year + BUDDHIST_ERA_OFFSET} "
        f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}"
    )


class SheetsRecorder:
    """Write repair rows to the configured spreadsheet"""

    def __init__(
        self,
        spreadsheet_id: str,
        include_details_ai: bool = True,
        timezone: str = "Asia/Bangkok",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            spreadsheet_id: Target Google Sheet id.
            include_details_ai: Write the 10-column layout with Details_AI.
            timezone: IANA zone used for the server-side timestamp.
            clock: Returns the current aware datetime; injectable for tests.
        """
        self.spreadsheet_id = spreadsheet_id
        self.include_details_ai = include_details_ai
        self.tz = ZoneInfo(timezone)
        self._clock = clock or (lambda: datetime.now(self.tz))

    @property
    def columns(self) -> List[str]:
        return SHEET_COLUMNS if self.include_details_ai else SHEET_COLUMNS_V1

    def timestamp(self) -> str:
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(self.tz)
        return format_thai_timestamp(now)

    def build_row(self, report: RepairReport, file_reference: str, timestamp: Optional[str] = None) -> List[str]:
        """
        Build the positional row for a report.

        Args:
            report: The submitted report.
            file_reference: Drive link, failure marker, or "".
            timestamp: Pre-formatted timestamp; generated now when omitted.
        """
        row = [
            timestamp if timestamp is not None else self.timestamp(),
            report.substation,
            report.doc_number,
            report.equipment_id,
            report.details,
        ]
        if self.include_details_ai:
            row.append(report.details_ai)
        row.extend([
            report.responsible,
            report.status,
            report.signed_date,
            file_reference or "",
        ])
        return row

    def first_sheet_title(self, spreadsheet) -> str:
        """Read spreadsheet metadata and return the title of the first tab."""
        metadata = spreadsheet.fetch_sheet_metadata()
        sheets = metadata.get("sheets") or []
        if sheets:
            title = sheets[0].get("properties", {}).get("title")
            if title:
                return title
        return DEFAULT_SHEET_NAME

    def append_row(self, client, row: List[str]) -> str:
        """
        Append a row to the first tab, letting Sheets parse dates and numbers.

        Returns:
            The A1 range the row was appended against.

        Raises:
            RecorderFailure: on any Sheets error; no row is written.
        """
        try:
            spreadsheet = client.sheets.open_by_key(self.spreadsheet_id)
            title = self.first_sheet_title(spreadsheet)
            target_range = absolute_range_name(title, f"A:{get_column_letter(len(self.columns))}")
            spreadsheet.values_append(
                target_range,
                params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                body={"values": [row]},
            )
            return target_range
        except Exception as e:
            raise RecorderFailure(f"Failed to append data to Google Sheet: {str(e)}") from e

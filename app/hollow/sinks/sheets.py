"""Google Sheets report sink.

Appends report rows to a worksheet through the Sheets v4 API using
service-account credentials. The worksheet is created when missing.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from hollow.sinks.base import ReportSink, ReportSinkError

logger = logging.getLogger(__name__)

SHEETS_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/spreadsheets",)


def build_sheets_service(credentials_file: Path) -> Any:
    """Build a Sheets v4 service from a service-account key file.

    Raises:
        FileNotFoundError: If the key file does not exist.
        ValueError: If the key file is not a valid service-account key.
    """
    credentials = service_account.Credentials.from_service_account_file(
        str(credentials_file), scopes=list(SHEETS_SCOPES)
    )
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


class GoogleSheetsSink(ReportSink):
    """Writes the report to a Google Sheets worksheet.

    Args:
        service: A built Sheets v4 service resource.
        spreadsheet_id: Target spreadsheet.
        sheet_name: Worksheet (tab) name.
        num_retries: Retries for transient API errors.
    """

    def __init__(
        self,
        service: Any,
        spreadsheet_id: str,
        sheet_name: str = "Empty Folders",
        *,
        num_retries: int = 3,
    ) -> None:
        if not spreadsheet_id:
            msg = "spreadsheet_id cannot be empty"
            raise ValueError(msg)
        self._service = service
        self._spreadsheet_id = spreadsheet_id
        self._sheet_name = sheet_name
        self._num_retries = num_retries

    @property
    def location(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self._spreadsheet_id} ({self._sheet_name})"

    @property
    def _range(self) -> str:
        escaped = self._sheet_name.replace("'", "''")
        return f"'{escaped}'!A1"

    def initialize_schema(self, columns: Sequence[str]) -> None:
        self._ensure_sheet()

        values = self._service.spreadsheets().values()
        response = self._execute(values.get(spreadsheetId=self._spreadsheet_id, range=self._range))
        if response.get("values"):
            logger.debug("Worksheet %s already has a header row", self._sheet_name)
            return

        request = values.update(
            spreadsheetId=self._spreadsheet_id,
            range=self._range,
            valueInputOption="RAW",
            body={"values": [list(columns)]},
        )
        self._execute(request)

    def append_rows(self, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        request = (
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=self._range,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [list(row) for row in rows]},
            )
        )
        self._execute(request)
        logger.debug("Appended %d row(s) to %s", len(rows), self._sheet_name)

    def _ensure_sheet(self) -> None:
        """Create the worksheet if the spreadsheet does not have it yet."""
        spreadsheets = self._service.spreadsheets()
        metadata = self._execute(
            spreadsheets.get(spreadsheetId=self._spreadsheet_id, fields="sheets.properties.title")
        )
        titles = {sheet["properties"]["title"] for sheet in metadata.get("sheets", [])}
        if self._sheet_name in titles:
            return

        logger.info("Creating worksheet %s", self._sheet_name)
        body = {"requests": [{"addSheet": {"properties": {"title": self._sheet_name}}}]}
        self._execute(spreadsheets.batchUpdate(spreadsheetId=self._spreadsheet_id, body=body))

    def _execute(self, request: Any) -> dict[str, Any]:
        """Execute an API request, mapping client errors to ReportSinkError."""
        try:
            return request.execute(num_retries=self._num_retries)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            msg = f"Sheets API error {status}: {e.reason}"
            raise ReportSinkError(msg) from e
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            raise ReportSinkError(f"Sheets request failed: {e}") from e

"""Transport layer for the Google Sheets API.

Defines the Transport protocol and implementations:
- GoogleSheetsTransport: Production transport using Google Sheets API
- LocalFileTransport: Test transport reading from local golden files
"""

from __future__ import annotations

import json
import ssl
import urllib.parse
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

import certifi
import httpx
from loguru import logger

# API constants
API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
DEFAULT_TIMEOUT = 60
METADATA_FIELDS = (
    "spreadsheetId,spreadsheetUrl,properties,sheets.properties,sheets.conditionalFormats"
)


class TransportError(Exception):
    """Base exception for transport errors."""


class AuthenticationError(TransportError):
    """Raised when authentication fails (401/403)."""


class SpreadsheetNotFoundError(TransportError):
    """Raised when spreadsheet is not found (404)."""


class APIError(TransportError):
    """Raised when the API returns an error."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class SheetInfo:
    """Information about a single sheet within a spreadsheet."""

    sheet_id: int
    title: str
    index: int
    row_count: int
    column_count: int


@dataclass(frozen=True)
class SpreadsheetMetadata:
    """Metadata about a spreadsheet, including sheet information.

    Sheets keep the order the API returned them in.
    """

    spreadsheet_id: str
    title: str
    sheets: tuple[SheetInfo, ...]
    raw: dict[str, Any]


def parse_metadata(response: dict[str, Any], spreadsheet_id: str) -> SpreadsheetMetadata:
    """Build SpreadsheetMetadata from a spreadsheets.get response."""
    sheets: list[SheetInfo] = []
    for position, sheet in enumerate(response.get("sheets", [])):
        props = sheet.get("properties", {})
        grid_props = props.get("gridProperties", {})
        sheets.append(
            SheetInfo(
                sheet_id=props.get("sheetId", 0),
                title=props.get("title", ""),
                index=props.get("index", position),
                row_count=grid_props.get("rowCount", 0),
                column_count=grid_props.get("columnCount", 0),
            )
        )

    return SpreadsheetMetadata(
        spreadsheet_id=response.get("spreadsheetId", spreadsheet_id),
        title=response.get("properties", {}).get("title", ""),
        sheets=tuple(sheets),
        raw=response,
    )


class Transport(ABC):
    """Abstract base class for spreadsheet transport.

    Implementations must provide the metadata fetch, spreadsheet creation,
    the structural batchUpdate and the values endpoints.
    """

    @abstractmethod
    async def get_metadata(self, spreadsheet_id: str) -> SpreadsheetMetadata:
        """Fetch spreadsheet metadata without cell data."""
        ...

    @abstractmethod
    async def create_spreadsheet(self, body: dict[str, Any]) -> dict[str, Any]:
        """Create a spreadsheet and return the created resource."""
        ...

    @abstractmethod
    async def batch_update(
        self, spreadsheet_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply structural requests in one atomic batch."""
        ...

    @abstractmethod
    async def get_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        """Read the values in a range."""
        ...

    @abstractmethod
    async def update_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """Overwrite values in a range."""
        ...

    @abstractmethod
    async def append_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """Append rows after the table found in a range."""
        ...

    @abstractmethod
    async def clear_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        """Clear values (not formatting) in a range."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        ...


class GoogleSheetsTransport(Transport):
    """Production transport that talks to the Google Sheets API.

    Handles authentication, SSL, and HTTP communication.
    """

    def __init__(
        self,
        access_token: str,
        timeout: int = DEFAULT_TIMEOUT,
        api_base: str = API_BASE,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            access_token: OAuth2 access token with the spreadsheets scope
            timeout: Request timeout in seconds
            api_base: Base URL of the spreadsheets collection
            http_transport: Optional httpx transport, used by tests
        """
        self._api_base = api_base.rstrip("/")
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        self._client = httpx.AsyncClient(
            timeout=timeout,
            verify=ssl_context,
            transport=http_transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )

    async def get_metadata(self, spreadsheet_id: str) -> SpreadsheetMetadata:
        """Fetch sheet properties only; no grid data."""
        url = f"{self._api_base}/{spreadsheet_id}"
        response = await self._request(
            "GET", url, params={"fields": METADATA_FIELDS}
        )
        return parse_metadata(response, spreadsheet_id)

    async def create_spreadsheet(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST /v4/spreadsheets"""
        return await self._request("POST", self._api_base, body=body)

    async def batch_update(
        self, spreadsheet_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """POST /v4/spreadsheets/{id}:batchUpdate"""
        url = f"{self._api_base}/{spreadsheet_id}:batchUpdate"
        return await self._request("POST", url, body={"requests": requests})

    async def get_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        """GET /v4/spreadsheets/{id}/values/{range}"""
        url = f"{self._api_base}/{spreadsheet_id}/values/{_quote_range(range_a1)}"
        return await self._request("GET", url)

    async def update_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """PUT /v4/spreadsheets/{id}/values/{range}"""
        url = f"{self._api_base}/{spreadsheet_id}/values/{_quote_range(range_a1)}"
        return await self._request(
            "PUT",
            url,
            params={"valueInputOption": "USER_ENTERED"},
            body={"values": values},
        )

    async def append_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        """POST /v4/spreadsheets/{id}/values/{range}:append"""
        url = f"{self._api_base}/{spreadsheet_id}/values/{_quote_range(range_a1)}:append"
        return await self._request(
            "POST",
            url,
            params={
                "valueInputOption": "USER_ENTERED",
                "insertDataOption": "INSERT_ROWS",
            },
            body={"values": values},
        )

    async def clear_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        """POST /v4/spreadsheets/{id}/values/{range}:clear"""
        url = f"{self._api_base}/{spreadsheet_id}/values/{_quote_range(range_a1)}:clear"
        return await self._request("POST", url, body={})

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request and map HTTP failures."""
        logger.debug("{} {}", method, url)
        try:
            response = await self._client.request(method, url, params=params, json=body)
            response.raise_for_status()
            result: dict[str, Any] = response.json()
            return result
        except ValueError as e:
            raise TransportError(f"Invalid JSON response: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise AuthenticationError("Invalid or expired access token") from e
            if status == 403:
                raise AuthenticationError(
                    "Access denied. Check your scopes and permissions."
                ) from e
            if status == 404:
                raise SpreadsheetNotFoundError(
                    "Spreadsheet not found. Check the ID and sharing permissions."
                ) from e
            detail = e.response.text
            raise APIError(f"API error ({status}): {detail}", status_code=status) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


class LocalFileTransport(Transport):
    """Test transport that reads metadata from local golden files.

    Expected directory structure:
        golden_dir/
            <spreadsheet_id>/
                metadata.json
                values.json      (optional, A1 range -> values)

    Mutating calls are recorded instead of sent so tests can inspect them.
    """

    def __init__(self, golden_dir: Path) -> None:
        """Initialize the transport.

        Args:
            golden_dir: Directory containing golden test files
        """
        self._golden_dir = golden_dir
        self.metadata_fetches: list[str] = []
        self.batch_updates: list[dict[str, Any]] = []
        self.value_writes: list[dict[str, Any]] = []
        self.created: list[dict[str, Any]] = []

    async def get_metadata(self, spreadsheet_id: str) -> SpreadsheetMetadata:
        """Read metadata from local file."""
        path = self._golden_dir / spreadsheet_id / "metadata.json"
        if not path.exists():
            raise SpreadsheetNotFoundError(f"Golden file not found: {path}")
        self.metadata_fetches.append(spreadsheet_id)
        return parse_metadata(json.loads(path.read_text()), spreadsheet_id)

    async def create_spreadsheet(self, body: dict[str, Any]) -> dict[str, Any]:
        """Record the body and echo it back as the created spreadsheet."""
        self.created.append(body)
        spreadsheet_id = f"local-spreadsheet-{len(self.created)}"
        sheets = body.get("sheets") or [{"properties": {"title": "Sheet1", "index": 0}}]
        return {
            "spreadsheetId": spreadsheet_id,
            "spreadsheetUrl": f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit",
            "properties": body.get("properties", {}),
            "sheets": [
                {"properties": {**sheet["properties"], "sheetId": position}}
                for position, sheet in enumerate(sheets)
            ],
        }

    async def batch_update(
        self, spreadsheet_id: str, requests: list[dict[str, Any]]
    ) -> dict[str, Any]:
        """Record the batch and return one empty reply per request."""
        self.batch_updates.append(
            {"spreadsheet_id": spreadsheet_id, "requests": requests}
        )
        return {
            "spreadsheetId": spreadsheet_id,
            "replies": [{} for _ in requests],
        }

    async def get_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        """Look the range up in values.json; unknown ranges are empty."""
        spreadsheet_dir = self._golden_dir / spreadsheet_id
        if not spreadsheet_dir.is_dir():
            raise SpreadsheetNotFoundError(f"Golden file not found: {spreadsheet_dir}")
        path = spreadsheet_dir / "values.json"
        ranges = json.loads(path.read_text()) if path.exists() else {}
        response: dict[str, Any] = {"range": range_a1, "majorDimension": "ROWS"}
        if range_a1 in ranges:
            response["values"] = ranges[range_a1]
        return response

    async def update_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        self.value_writes.append(
            {"op": "update", "range": range_a1, "values": values}
        )
        return {
            "spreadsheetId": spreadsheet_id,
            "updatedRange": range_a1,
            "updatedRows": len(values),
            "updatedCells": sum(len(row) for row in values),
        }

    async def append_values(
        self, spreadsheet_id: str, range_a1: str, values: list[list[Any]]
    ) -> dict[str, Any]:
        self.value_writes.append(
            {"op": "append", "range": range_a1, "values": values}
        )
        return {
            "spreadsheetId": spreadsheet_id,
            "updates": {
                "updatedRange": range_a1,
                "updatedRows": len(values),
                "updatedCells": sum(len(row) for row in values),
            },
        }

    async def clear_values(self, spreadsheet_id: str, range_a1: str) -> dict[str, Any]:
        self.value_writes.append({"op": "clear", "range": range_a1, "values": []})
        return {"spreadsheetId": spreadsheet_id, "clearedRange": range_a1}

    async def close(self) -> None:
        """No-op for local file transport."""
        pass


def _quote_range(range_a1: str) -> str:
    return urllib.parse.quote(range_a1, safe="")

# tradelists/remote.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

import requests
from requests import Response

logger = logging.getLogger(__name__)


class RemoteFetchError(RuntimeError):
    """Raised when the remote store cannot be read or returns junk."""


@dataclass(frozen=True)
class RemoteFile:
    filename: str
    content: str


class RemoteSource(Protocol):
    def fetch(self) -> List[RemoteFile]:
        ...


class SupabaseSource:
    """Reads ``filename``/``file_content`` rows from a Supabase REST table."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = "csv_files",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    def fetch(self) -> List[RemoteFile]:
        url = f"{self.base_url}/rest/v1/{self.table}"
        try:
            response = self.session.get(
                url,
                headers=self.headers,
                params={"select": "filename,file_content"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteFetchError(f"GET {url} failed: {exc}") from exc
        rows = self._handle_response(response)

        files: List[RemoteFile] = []
        for row in rows:
            if not isinstance(row, dict) or not row.get("filename"):
                logger.warning("Skipping remote row without a filename")
                continue
            files.append(RemoteFile(filename=str(row["filename"]), content=str(row.get("file_content") or "")))
        logger.info("Fetched %d trade lists from %s", len(files), self.table)
        return files

    def _handle_response(self, response: Response) -> list:
        if not response.ok:
            try:
                payload = response.json()
                message = payload.get("message") or payload
            except (ValueError, AttributeError):
                message = response.text
            raise RemoteFetchError(f"Request failed with status {response.status_code}: {message}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFetchError("Response was not valid JSON") from exc
        if not isinstance(payload, list):
            raise RemoteFetchError("Expected a list of rows")
        return payload

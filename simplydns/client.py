"""HTTP client for the Simply.com DNS API."""

from __future__ import annotations

import base64
import json
import re
import time
from typing import Any, Callable
from urllib.parse import quote

import requests

from .models import SimplyRecord, SimplyRecordResponse, record_from_json

DEFAULT_BASE_URL = "https://api.simply.com/2/"
DEFAULT_MAX_RETRIES = 3

_RETRY_AFTER_HEADER = "x-ratelimit-retry-after"
_TOO_MANY_REQUESTS = 429
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class SimplyApiError(Exception):
    """Raised when the Simply.com API rejects a request or answers badly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def trim_trailing_dot(s: str) -> str:
    """Remove one trailing dot from a domain name, if present."""
    return s[:-1] if s.endswith(".") else s


def _parse_retry_after(value: str | None) -> int:
    if not value:
        return 0
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def _error_from_response(response: requests.Response) -> SimplyApiError:
    status = response.status_code
    try:
        payload = response.json()
    except ValueError:
        payload = None
    message = payload.get("message") if isinstance(payload, dict) else None
    if not isinstance(message, str) or not message:
        return SimplyApiError(f"server returned HTTP error {status}", status)
    return SimplyApiError(message, status)


class SimplyApiClient:
    """Talks to the Simply.com DNS record endpoints.

    Requests answered with HTTP 429 are retried after the delay the server
    asks for, or with exponential backoff, up to ``max_retries`` times;
    a negative ``max_retries`` retries without limit.
    """

    def __init__(
        self,
        account_name: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = DEFAULT_MAX_RETRIES,
        session: requests.Session | None = None,
        timeout: float | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.account_name = account_name
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._sleep = sleep

    @property
    def _authorization(self) -> str:
        credentials = f"{self.account_name}:{self.api_key}".encode()
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    def _records_url(self, zone: str, *extra: str) -> str:
        segments = ("my/products", quote(trim_trailing_dot(zone), safe=""), "dns/records", *extra)
        path = "/".join(segment.strip("/") for segment in segments)
        return f"{self.base_url.rstrip('/')}/{path}"

    def _request(self, method: str, url: str, body: dict[str, Any] | None = None) -> Any:
        headers = {"Authorization": self._authorization}
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body, separators=(",", ":")).encode("utf-8")

        retries = 0
        while True:
            response = self._session.request(
                method, url, data=data, headers=headers, timeout=self.timeout
            )
            if response.status_code == _TOO_MANY_REQUESTS and (
                self.max_retries < 0 or retries < self.max_retries
            ):
                response.close()
                retries += 1
                delay = _parse_retry_after(response.headers.get(_RETRY_AFTER_HEADER))
                if delay <= 0:
                    delay = 1 << retries
                self._sleep(delay)
                continue

            with response:
                if not 200 <= response.status_code <= 299:
                    raise _error_from_response(response)
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise SimplyApiError(
                        f"invalid response body: {exc}", response.status_code
                    ) from exc
            if payload is None:
                raise SimplyApiError("got empty response", response.status_code)
            return payload

    def get_dns_records(self, zone: str) -> list[SimplyRecordResponse]:
        """Return every record in ``zone``."""
        payload = self._request("GET", self._records_url(zone))
        if not isinstance(payload, dict):
            raise SimplyApiError("unexpected response body for record listing")
        return [record_from_json(item) for item in payload.get("records") or []]

    def add_dns_record(self, zone: str, record: SimplyRecord) -> int:
        """Create ``record`` in ``zone`` and return the id the server gave it."""
        payload = self._request("POST", self._records_url(zone), record.to_json())
        if not isinstance(payload, dict):
            raise SimplyApiError("unexpected response body for record creation")
        created = payload.get("record") or {}
        return int(created.get("id", 0))

    def update_dns_record(self, zone: str, record_id: int, record: SimplyRecord) -> None:
        """Replace the record ``record_id`` in ``zone`` with ``record``."""
        url = self._records_url(zone, str(record_id))
        try:
            self._request("PUT", url, record.to_json())
        except (SimplyApiError, requests.RequestException) as exc:
            raise SimplyApiError(
                f"failed to update DNS record {record_id}: {exc}",
                getattr(exc, "status_code", None),
            ) from exc

    def delete_dns_record(self, zone: str, record_id: int) -> None:
        """Delete the record ``record_id`` from ``zone``."""
        url = self._records_url(zone, str(record_id))
        try:
            self._request("DELETE", url)
        except (SimplyApiError, requests.RequestException) as exc:
            raise SimplyApiError(
                f"failed to delete DNS record {record_id}: {exc}",
                getattr(exc, "status_code", None),
            ) from exc
"""Record sources: HTTP via httpx, and local files.

A source performs the two suspension points of a render pass (awaiting the
response, awaiting the body) and hands back a decoded :class:`Record`. Any
failure is raised as a :class:`~viewbind.errors.RecordLoadError` subclass so
the page runner can take the single error path.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

import httpx

from viewbind.domain.record import Record
from viewbind.errors import DecodeError, TransportError

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Anything that can produce one Record per call."""

    @property
    def location(self) -> str: ...

    async def fetch(self) -> Record: ...


def decode_document(body: bytes, *, source: str) -> Record:
    """Decode a JSON body whose top level must be an object.

    Raises:
        DecodeError: On invalid or too deeply nested JSON, or a non-object
            top level.
    """
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as exc:  # RecursionError: nesting too deep
        msg = f"Invalid JSON from {source}: {exc}"
        raise DecodeError(msg, source=source) from exc
    if not isinstance(data, dict):
        msg = f"Expected a JSON object from {source}, got {type(data).__name__}"
        raise DecodeError(msg, source=source)
    return Record(data)


class HttpRecordSource:
    """Fetch a JSON document over HTTP.

    Args:
        path: URL or path relative to *base_url* (e.g. ``data/invoice.json``).
        client: Shared client; when omitted a client is created per fetch.
        base_url: Base for relative paths when this source owns its client.
        timeout: Seconds before giving up; ``None`` waits indefinitely.
    """

    def __init__(
        self,
        path: str,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str = "",
        timeout: float | None = None,
    ) -> None:
        self.path = path
        self.base_url = base_url
        self.timeout = timeout
        self._client = client

    @property
    def location(self) -> str:
        if self._client is not None:
            return str(self._client.base_url.join(self.path))
        return str(httpx.URL(self.base_url).join(self.path)) if self.base_url else self.path

    async def fetch(self) -> Record:
        client = self._client or httpx.AsyncClient(
            base_url=self.base_url, timeout=httpx.Timeout(self.timeout)
        )
        try:
            body = await self._get(client)
        finally:
            if self._client is None:
                await client.aclose()
        return decode_document(body, source=self.location)

    async def _get(self, client: httpx.AsyncClient) -> bytes:
        logger.debug("Fetching record from %s", self.location)
        try:
            response = await client.get(self.path, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            msg = f"Request to {self.location} failed: {exc}"
            raise TransportError(msg, source=self.location) from exc
        if not response.is_success:
            msg = f"HTTP error! status: {response.status_code}"
            raise TransportError(msg, source=self.location, status=response.status_code)
        try:
            return await response.aread()
        except httpx.HTTPError as exc:
            msg = f"Reading body from {self.location} failed: {exc}"
            raise TransportError(msg, source=self.location) from exc


class FileRecordSource:
    """Read a JSON document from disk (offline rendering of a static site's data)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    @property
    def location(self) -> str:
        return str(self.path)

    async def fetch(self) -> Record:
        logger.debug("Reading record from %s", self.path)
        try:
            body = self.path.read_bytes()
        except OSError as exc:
            msg = f"Cannot read {self.path}: {exc.strerror or exc}"
            raise TransportError(msg, source=self.location) from exc
        return decode_document(body, source=self.location)


def source_for(
    location: str,
    *,
    base_url: str = "",
    timeout: float | None = None,
) -> RecordSource:
    """Pick an HTTP source for URLs (or when a base URL is set), else a file source."""
    if base_url or location.startswith(("http://", "https://")):
        return HttpRecordSource(location, base_url=base_url, timeout=timeout)
    return FileRecordSource(Path(location))

"""Async HTTP transport for the Geometry Backend API (v2)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from cad_converter import __version__
from cad_converter.schemas import Session
from cad_converter.types import SDTF_MIME_TYPE, BindingMap

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v2"
SDTF_UPLOAD_NAMESPACE = "pub"

type JsonObject = dict[str, Any]


def _session_url(session: Session, suffix: str) -> str:
    return f"{session.endpoint_url}{API_PREFIX}/session/{session.session_id}/{suffix}"


def _json_object(response: httpx.Response) -> JsonObject:
    """Raise on HTTP error status and decode a JSON object body."""
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict):
        raise httpx.DecodingError(
            f"expected JSON object from {response.request.url}, got {type(payload).__name__}",
            request=response.request,
        )
    return payload


class GeometryBackendClient:
    """Raw request/response calls against the remote geometry service.

    Methods raise ``httpx`` exceptions unchanged; adapters translate them
    into conversion errors. The client owns its ``httpx.AsyncClient`` unless
    one is passed in.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers={"User-Agent": f"cad-remote-converter/{__version__}"},
        )

    async def __aenter__(self) -> GeometryBackendClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def open_session(self, endpoint_url: str, ticket: str) -> JsonObject:
        logger.debug("opening session at %s", endpoint_url)
        response = await self._http.post(f"{endpoint_url}{API_PREFIX}/ticket/{ticket}")
        return _json_object(response)

    async def request_file_upload(
        self,
        session: Session,
        parameter_id: str,
        mime_type: str,
        size: int,
    ) -> JsonObject:
        response = await self._http.post(
            _session_url(session, "file/upload"),
            json={parameter_id: {"format": mime_type, "size": size}},
        )
        return _json_object(response)

    async def request_sdtf_upload(self, session: Session, size: int) -> JsonObject:
        response = await self._http.post(
            _session_url(session, "sdtf/upload"),
            json=[
                {
                    "content_type": SDTF_MIME_TYPE,
                    "content_length": size,
                    "namespace": SDTF_UPLOAD_NAMESPACE,
                }
            ],
        )
        return _json_object(response)

    async def put_bytes(self, href: str, data: bytes, content_type: str) -> None:
        response = await self._http.put(
            href,
            content=data,
            headers={"Content-Type": content_type},
        )
        response.raise_for_status()

    async def customize(self, session: Session, bindings: BindingMap) -> JsonObject:
        response = await self._http.put(_session_url(session, "output"), json=dict(bindings))
        return _json_object(response)

    async def get_cached_outputs(
        self,
        session: Session,
        versions: Mapping[str, str],
    ) -> JsonObject:
        response = await self._http.post(
            _session_url(session, "output/cache"),
            json=dict(versions),
        )
        return _json_object(response)

    async def get_bytes(self, href: str) -> bytes:
        response = await self._http.get(href)
        response.raise_for_status()
        return response.content

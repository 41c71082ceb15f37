"""Asset upload adapter implementing the ``AssetUploader`` port."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cad_converter.errors import UploadError
from cad_converter.infrastructure.backend import GeometryBackendClient
from cad_converter.schemas import Session, UploadedAsset
from cad_converter.types import AssetNamespace

logger = logging.getLogger(__name__)


def _upload_target(
    payload: dict[str, Any],
    namespace: AssetNamespace,
    parameter_id: str,
) -> tuple[str, str]:
    """Extract ``(asset_id, href)`` from an upload request response."""
    asset = payload.get("asset") or {}
    try:
        if namespace is AssetNamespace.FILE:
            target = asset["file"][parameter_id]
        else:
            target = asset["sdtf"][0]
        asset_id, href = target.get("id"), target.get("href")
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise UploadError(
            f"Upload response carries no {namespace.value} target for {parameter_id}"
        ) from exc
    if not asset_id or not href:
        raise UploadError(
            f"Upload target for {parameter_id} lacks an asset id or href"
        )
    return str(asset_id), str(href)


class BackendAssetUploader:
    """Request an upload target and transfer the bytes to it."""

    def __init__(self, client: GeometryBackendClient) -> None:
        self._client = client

    async def upload(
        self,
        session: Session,
        data: bytes,
        mime_type: str,
        namespace: AssetNamespace,
        parameter_id: str,
    ) -> UploadedAsset:
        """Upload ``data`` and return the remote asset reference."""
        size = len(data)
        try:
            if namespace is AssetNamespace.FILE:
                payload = await self._client.request_file_upload(
                    session, parameter_id, mime_type, size
                )
            else:
                payload = await self._client.request_sdtf_upload(session, size)
        except httpx.HTTPStatusError as exc:
            raise UploadError(
                f"Upload request rejected with HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UploadError(f"Upload request failed: {exc}") from exc

        asset_id, href = _upload_target(payload, namespace, parameter_id)
        logger.debug("transferring %d bytes for asset %s", size, asset_id)
        try:
            await self._client.put_bytes(href, data, mime_type)
        except httpx.HTTPStatusError as exc:
            raise UploadError(
                f"Upload transfer rejected with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"Upload transfer failed: {exc}") from exc
        return UploadedAsset(id=asset_id, href=href, format=mime_type)

"""Artifact download adapter implementing the ``ArtifactDownloader`` port."""

from __future__ import annotations

import httpx

from cad_converter.errors import DownloadError
from cad_converter.infrastructure.backend import GeometryBackendClient


class BackendArtifactDownloader:
    """Fetch result artifacts into memory."""

    def __init__(self, client: GeometryBackendClient) -> None:
        self._client = client

    async def download(self, href: str) -> bytes:
        try:
            return await self._client.get_bytes(href)
        except httpx.HTTPStatusError as exc:
            raise DownloadError(
                f"Download rejected with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DownloadError(f"Download failed: {exc}") from exc

"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from cad_converter.schemas import JobResult, Session, UploadedAsset
from cad_converter.types import AssetNamespace, BindingMap


class MimeTypeResolver(Protocol):
    """Resolve candidate mime types from a filename."""

    def __call__(self, path: Path) -> Sequence[str]:
        """Return candidates, most specific first; empty if unknown."""


class RemoteSession(Protocol):
    """Open a session against a remote converter model."""

    async def open(self, endpoint_url: str, access_ticket: str) -> Session:
        """Open session and return the model's declared schema."""


class AssetUploader(Protocol):
    """Upload input bytes so they can be bound to a parameter."""

    async def upload(
        self,
        session: Session,
        data: bytes,
        mime_type: str,
        namespace: AssetNamespace,
        parameter_id: str,
    ) -> UploadedAsset:
        """Request an upload target, transfer bytes, return the asset."""


class JobRunner(Protocol):
    """Submit a computation and wait for its terminal state."""

    async def submit(self, session: Session, bindings: BindingMap) -> JobResult:
        """Return the outputs once no output is pending anymore."""


class ArtifactDownloader(Protocol):
    """Fetch result bytes."""

    async def download(self, href: str) -> bytes:
        """Return the full content behind ``href``."""

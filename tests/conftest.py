"""Shared pytest configuration, marker assignment and remote-service fakes."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from cad_converter.errors import DownloadError
from cad_converter.schemas import JobResult, Session, UploadedAsset
from cad_converter.types import AssetNamespace, BindingMap


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's .env and exported tickets out of test runs."""
    for name in (
        "MODEL_VIEW_URL",
        "BACKEND_TICKET_CAD_TO_SDTF",
        "BACKEND_TICKET_SDTF_TO_GLTF",
        "CONVERTER_HTTP_TIMEOUT",
        "CONVERTER_JOB_TIMEOUT",
        "CONVERTER_POLL_INTERVAL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class FakeRemoteService:
    """In-process stand-in for the session, upload, job and download ports.

    With ``echo=True`` the job returns one successful output whose item
    points back at the uploaded bytes.
    """

    def __init__(
        self,
        *,
        parameters: Mapping[str, object] | None = None,
        outputs: Mapping[str, object] | None = None,
        artifacts: Mapping[str, bytes] | None = None,
        submit_error: Exception | None = None,
        echo: bool = False,
        echo_format: str = "sdtf",
    ) -> None:
        self.parameters = dict(parameters or {})
        self.outputs = dict(outputs or {})
        self.artifacts = dict(artifacts or {})
        self.submit_error = submit_error
        self.echo = echo
        self.echo_format = echo_format
        self.calls = {"open": 0, "upload": 0, "submit": 0, "download": 0}
        self.uploads: list[tuple[bytes, str, AssetNamespace, str]] = []
        self.bindings: list[dict[str, object]] = []
        self.opened_with: list[tuple[str, str]] = []

    async def open(self, endpoint_url: str, access_ticket: str) -> Session:
        self.calls["open"] += 1
        self.opened_with.append((endpoint_url, access_ticket))
        return Session.model_validate(
            {"sessionId": "session-1", "parameters": self.parameters, "outputs": {}}
        )

    async def upload(
        self,
        session: Session,
        data: bytes,
        mime_type: str,
        namespace: AssetNamespace,
        parameter_id: str,
    ) -> UploadedAsset:
        del session
        self.calls["upload"] += 1
        self.uploads.append((data, mime_type, namespace, parameter_id))
        asset_id = f"asset-{len(self.uploads)}"
        if self.echo:
            self.artifacts[f"https://results.example/{asset_id}"] = data
        return UploadedAsset(
            id=asset_id,
            href=f"https://uploads.example/{asset_id}",
            format=mime_type,
        )

    async def submit(self, session: Session, bindings: BindingMap) -> JobResult:
        del session
        self.calls["submit"] += 1
        self.bindings.append(dict(bindings))
        if self.submit_error is not None:
            raise self.submit_error
        outputs = self.outputs
        if self.echo:
            asset_id = next(iter(bindings.values()))
            item = {"href": f"https://results.example/{asset_id}"}
            if self.echo_format.startswith("model/"):
                item["contentType"] = self.echo_format
            else:
                item["format"] = self.echo_format
            outputs = {
                "echo": {"id": "echo", "status_computation": "success", "content": [item]}
            }
        return JobResult.model_validate({"outputs": outputs})

    async def download(self, href: str) -> bytes:
        self.calls["download"] += 1
        try:
            return self.artifacts[href]
        except KeyError as exc:
            raise DownloadError(f"no artifact at {href}") from exc


@pytest.fixture
def remote_service() -> Callable[..., FakeRemoteService]:
    """Factory for configured ``FakeRemoteService`` instances."""
    return FakeRemoteService

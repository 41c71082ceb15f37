"""Unit tests for the conversion pipeline state machine."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from cad_converter.application.use_cases import POLICIES, ConversionPipeline, PipelineState
from cad_converter.errors import (
    ComputationError,
    DownloadError,
    FileIOError,
    NoMatchingOutput,
    NoMatchingParameter,
    UnexpectedMimeType,
    UnknownMimeType,
)
from cad_converter.mime import guess_mime_types
from cad_converter.schemas import ConversionRequest
from cad_converter.types import AssetNamespace, ConversionMode

CAD_PARAMETERS = {"p1": {"id": "p1", "type": "File", "format": ["application/x-cad"]}}
SDTF_PARAMETERS = {
    "mesh": {"id": "mesh", "type": "sMesh"},
    "curves": {"id": "curves", "type": "sCurve"},
}


def _pipeline(
    mode: ConversionMode,
    service: Any,
    resolver: Callable[[Path], Sequence[str]] = guess_mime_types,
) -> ConversionPipeline:
    input_policy, output_policy = POLICIES[mode]
    return ConversionPipeline(
        mode=mode,
        input_policy=input_policy,
        output_policy=output_policy,
        session=service,
        uploader=service,
        job_runner=service,
        downloader=service,
        mime_resolver=resolver,
    )


def _request(input_path: Path, output_path: Path) -> ConversionRequest:
    return ConversionRequest(
        input_path=input_path,
        output_path=output_path,
        endpoint_url="https://backend.example",
        access_ticket="ticket",
    )


def _cad_resolver(path: Path) -> list[str]:
    return ["application/x-cad"] if path.suffix == ".cad" else []


def test_cad_mode_writes_selected_sdtf(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Upload to the file parameter and write the bytes behind the sdTF item."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"cad-bytes")
    target = tmp_path / "part.sdtf"
    service = remote_service(
        parameters=CAD_PARAMETERS,
        outputs={
            "o1": {
                "id": "o1",
                "status_computation": "success",
                "content": [{"format": "sdtf", "href": "X"}],
            }
        },
        artifacts={"X": b"sdtf-bytes"},
    )
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    result = asyncio.run(pipeline.run(_request(source, target)))

    assert target.read_bytes() == b"sdtf-bytes"
    assert pipeline.state is PipelineState.WRITTEN
    assert pipeline.failure is None
    assert service.uploads == [(b"cad-bytes", "application/x-cad", AssetNamespace.FILE, "p1")]
    assert service.bindings == [{"p1": "asset-1"}]
    assert service.opened_with == [("https://backend.example", "ticket")]
    assert result.parameter_ids == ("p1",)
    assert result.output_size_bytes == len(b"sdtf-bytes")
    assert result.mime_type == "application/x-cad"


def test_sdtf_mode_broadcasts_upload_and_selects_gltf(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Bind the single sdTF upload to every structured-data parameter."""
    source = tmp_path / "model.sdtf"
    source.write_bytes(b"sdtf")
    target = tmp_path / "model.glb"
    service = remote_service(
        parameters=SDTF_PARAMETERS,
        outputs={
            "o1": {
                "id": "o1",
                "status_computation": "success",
                "content": [{"format": "glb", "contentType": "model/gltf-binary", "href": "G"}],
            }
        },
        artifacts={"G": b"glTF"},
    )
    pipeline = _pipeline(ConversionMode.SDTF_TO_GLTF, service)

    asyncio.run(pipeline.run(_request(source, target)))

    assert target.read_bytes() == b"glTF"
    assert service.bindings == [{"mesh": "asset-1", "curves": "asset-1"}]
    assert service.uploads[0][2] is AssetNamespace.SDTF


def test_echo_roundtrip_preserves_bytes(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Bytes written to the output equal the uploaded buffer exactly."""
    payload = bytes(range(256)) * 64
    source = tmp_path / "part.cad"
    source.write_bytes(payload)
    target = tmp_path / "out.sdtf"
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)

    asyncio.run(
        _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver).run(
            _request(source, target)
        )
    )

    assert target.read_bytes() == payload


def test_unknown_mime_type_fails_before_network(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """An unrecognized extension fails with zero remote calls."""
    source = tmp_path / "part.unknownext"
    source.write_bytes(b"x")
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service)

    with pytest.raises(UnknownMimeType):
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.sdtf")))

    assert service.calls == {"open": 0, "upload": 0, "submit": 0, "download": 0}
    assert pipeline.state is PipelineState.FAILED
    assert isinstance(pipeline.failure, UnknownMimeType)


def test_unexpected_mime_type_fails_before_session(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """sdTF mode rejects a mismatching mime type before opening a session."""
    source = tmp_path / "model.sdtf"
    source.write_bytes(b"{}")
    service = remote_service(parameters=SDTF_PARAMETERS, echo=True)
    pipeline = _pipeline(
        ConversionMode.SDTF_TO_GLTF,
        service,
        lambda _path: ["application/json"],
    )

    with pytest.raises(UnexpectedMimeType, match="application/json"):
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.glb")))

    assert service.calls["open"] == 0


def test_unmatched_parameter_fails_before_upload(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """No upload happens when no parameter accepts the input."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    service = remote_service(
        parameters={"p1": {"id": "p1", "type": "File", "format": ["image/png"]}},
        echo=True,
    )
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    with pytest.raises(NoMatchingParameter):
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.sdtf")))

    assert service.calls["open"] == 1
    assert service.calls["upload"] == 0


def test_computation_failure_leaves_existing_output_untouched(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """A failed job neither creates nor overwrites the output file."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    fresh_target = tmp_path / "fresh.sdtf"
    existing_target = tmp_path / "existing.sdtf"
    existing_target.write_bytes(b"previous")

    for target in (fresh_target, existing_target):
        service = remote_service(
            parameters=CAD_PARAMETERS,
            submit_error=ComputationError("Computation failed: o1=algorithm_error"),
        )
        pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)
        with pytest.raises(ComputationError):
            asyncio.run(pipeline.run(_request(source, target)))
        assert service.calls["submit"] == 1
        assert service.calls["download"] == 0

    assert not fresh_target.exists()
    assert existing_target.read_bytes() == b"previous"


def test_missing_output_fails_after_job(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Report NoMatchingOutput with the raw outputs and skip the download."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    service = remote_service(
        parameters=CAD_PARAMETERS,
        outputs={"o1": {"id": "o1", "status_computation": "success", "content": []}},
    )
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    with pytest.raises(NoMatchingOutput) as info:
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.sdtf")))

    assert "o1" in info.value.outputs
    assert service.calls["submit"] == 1
    assert service.calls["download"] == 0


def test_download_failure_propagates(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Download errors surface unchanged."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    service = remote_service(
        parameters=CAD_PARAMETERS,
        outputs={
            "o1": {
                "id": "o1",
                "status_computation": "success",
                "content": [{"format": "sdtf", "href": "missing"}],
            }
        },
    )
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    with pytest.raises(DownloadError):
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.sdtf")))
    assert pipeline.state is PipelineState.FAILED


def test_existing_output_is_overwritten(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """A successful run replaces the previous output content."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"new")
    target = tmp_path / "out.sdtf"
    target.write_bytes(b"old content that is longer")
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)

    asyncio.run(
        _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver).run(
            _request(source, target)
        )
    )

    assert target.read_bytes() == b"new"


def test_unreadable_input_is_file_io_error(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Missing input files surface as FileIOError without an upload."""
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    with pytest.raises(FileIOError):
        asyncio.run(pipeline.run(_request(tmp_path / "gone.cad", tmp_path / "out.sdtf")))
    assert service.calls["upload"] == 0


def test_pipeline_instances_are_single_use(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """A second run on the same pipeline is refused."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)
    request = _request(source, tmp_path / "out.sdtf")

    asyncio.run(pipeline.run(request))
    with pytest.raises(RuntimeError, match="only once"):
        asyncio.run(pipeline.run(request))
    assert service.calls["open"] == 1


def test_unexpected_exception_still_moves_pipeline_to_failed(
    tmp_path: Path, remote_service: Callable[..., Any]
) -> None:
    """Errors outside the conversion taxonomy end the run in FAILED too."""
    source = tmp_path / "part.cad"
    source.write_bytes(b"x")
    service = remote_service(parameters=CAD_PARAMETERS, echo=True)

    async def broken_download(href: str) -> bytes:
        raise RuntimeError(f"transport crashed fetching {href}")

    service.download = broken_download
    pipeline = _pipeline(ConversionMode.CAD_TO_SDTF, service, _cad_resolver)

    with pytest.raises(RuntimeError, match="transport crashed"):
        asyncio.run(pipeline.run(_request(source, tmp_path / "out.sdtf")))

    assert pipeline.state is PipelineState.FAILED
    assert pipeline.failure is None
    assert not (tmp_path / "out.sdtf").exists()

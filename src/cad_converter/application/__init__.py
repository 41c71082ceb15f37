"""Application-layer use-cases, policies and option objects."""

from __future__ import annotations

from pathlib import Path

from cad_converter.application.options import ConversionOptions, PollingOptions
from cad_converter.application.policies import (
    GLTF_RESULT,
    SDTF_RESULT,
    FileParameterPolicy,
    OutputSelectionPolicy,
    ParameterMatch,
    StructuredDataParameterPolicy,
)
from cad_converter.application.ports import (
    ArtifactDownloader,
    AssetUploader,
    JobRunner,
    RemoteSession,
)
from cad_converter.application.results import ConversionResult


def build_conversion_options(
    *,
    http_timeout: float = 30.0,
    job_timeout: float = 600.0,
    poll_interval: float = 1.0,
) -> ConversionOptions:
    """Build typed conversion options via lazy use-case import."""
    from cad_converter.application.use_cases import build_conversion_options as _impl

    return _impl(
        http_timeout=http_timeout,
        job_timeout=job_timeout,
        poll_interval=poll_interval,
    )


async def convert_cad_to_sdtf(
    *,
    input_path: Path,
    output_path: Path,
    endpoint_url: str | None,
    access_ticket: str | None,
    options: ConversionOptions | None = None,
    session: RemoteSession | None = None,
    uploader: AssetUploader | None = None,
    job_runner: JobRunner | None = None,
    downloader: ArtifactDownloader | None = None,
) -> ConversionResult:
    """Convert a CAD file to sdTF via lazy use-case import."""
    from cad_converter.application.use_cases import convert_cad_to_sdtf as _impl

    return await _impl(
        input_path=input_path,
        output_path=output_path,
        endpoint_url=endpoint_url,
        access_ticket=access_ticket,
        options=options,
        session=session,
        uploader=uploader,
        job_runner=job_runner,
        downloader=downloader,
    )


async def convert_sdtf_to_gltf(
    *,
    input_path: Path,
    output_path: Path,
    endpoint_url: str | None,
    access_ticket: str | None,
    options: ConversionOptions | None = None,
    session: RemoteSession | None = None,
    uploader: AssetUploader | None = None,
    job_runner: JobRunner | None = None,
    downloader: ArtifactDownloader | None = None,
) -> ConversionResult:
    """Convert an sdTF file to glTF via lazy use-case import."""
    from cad_converter.application.use_cases import convert_sdtf_to_gltf as _impl

    return await _impl(
        input_path=input_path,
        output_path=output_path,
        endpoint_url=endpoint_url,
        access_ticket=access_ticket,
        options=options,
        session=session,
        uploader=uploader,
        job_runner=job_runner,
        downloader=downloader,
    )


__all__ = [
    "ConversionOptions",
    "PollingOptions",
    "ConversionResult",
    "FileParameterPolicy",
    "StructuredDataParameterPolicy",
    "OutputSelectionPolicy",
    "ParameterMatch",
    "SDTF_RESULT",
    "GLTF_RESULT",
    "build_conversion_options",
    "convert_cad_to_sdtf",
    "convert_sdtf_to_gltf",
]

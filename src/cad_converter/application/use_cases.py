"""Application use-cases orchestrating remote conversion workflows."""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path

from pydantic import SecretStr, ValidationError

from cad_converter.adapters.downloaders import BackendArtifactDownloader
from cad_converter.adapters.jobs import BackendJobRunner
from cad_converter.adapters.sessions import BackendRemoteSession
from cad_converter.adapters.uploaders import BackendAssetUploader
from cad_converter.application.options import ConversionOptions, PollingOptions
from cad_converter.application.policies import (
    GLTF_RESULT,
    SDTF_RESULT,
    FileParameterPolicy,
    InputParameterPolicy,
    OutputSelectionPolicy,
    StructuredDataParameterPolicy,
)
from cad_converter.application.ports import (
    ArtifactDownloader,
    AssetUploader,
    JobRunner,
    MimeTypeResolver,
    RemoteSession,
)
from cad_converter.application.results import ConversionResult
from cad_converter.errors import ConfigurationError, ConversionError, UnknownMimeType
from cad_converter.infrastructure.backend import GeometryBackendClient
from cad_converter.infrastructure.files import read_input_bytes, write_bytes_to_file
from cad_converter.mime import guess_mime_types
from cad_converter.schemas import ConversionRequest, Session, normalize_endpoint_url
from cad_converter.types import ConversionMode

logger = logging.getLogger(__name__)


class PipelineState(StrEnum):
    """Progress of one pipeline run."""

    START = "start"
    MIME_RESOLVED = "mime-resolved"
    SESSION_OPEN = "session-open"
    PARAMETER_MATCHED = "parameter-matched"
    ASSET_UPLOADED = "asset-uploaded"
    JOB_SUBMITTED = "job-submitted"
    JOB_SUCCEEDED = "job-succeeded"
    OUTPUT_SELECTED = "output-selected"
    DOWNLOADED = "downloaded"
    WRITTEN = "written"
    FAILED = "failed"


POLICIES: dict[ConversionMode, tuple[InputParameterPolicy, OutputSelectionPolicy]] = {
    ConversionMode.CAD_TO_SDTF: (FileParameterPolicy(), SDTF_RESULT),
    ConversionMode.SDTF_TO_GLTF: (StructuredDataParameterPolicy(), GLTF_RESULT),
}


class ConversionPipeline:
    """Upload a file, run the remote model, download the selected result.

    One instance serves exactly one run. Every failure moves the pipeline to
    ``FAILED`` and is re-raised unchanged; no step is retried.
    """

    def __init__(
        self,
        *,
        mode: ConversionMode,
        input_policy: InputParameterPolicy,
        output_policy: OutputSelectionPolicy,
        session: RemoteSession,
        uploader: AssetUploader,
        job_runner: JobRunner,
        downloader: ArtifactDownloader,
        mime_resolver: MimeTypeResolver = guess_mime_types,
    ) -> None:
        self.mode = mode
        self.input_policy = input_policy
        self.output_policy = output_policy
        self._session = session
        self._uploader = uploader
        self._job_runner = job_runner
        self._downloader = downloader
        self._mime_resolver = mime_resolver
        self.state = PipelineState.START
        self.failure: ConversionError | None = None

    def _advance(self, state: PipelineState) -> None:
        logger.debug("%s: %s -> %s", self.mode.value, self.state.value, state.value)
        self.state = state

    def resolve_mime_type(self, path: Path) -> str:
        """Return the first candidate mime type for ``path``."""
        candidates = self._mime_resolver(path)
        if not candidates:
            raise UnknownMimeType(f"Could not determine mime type of file {path}")
        return candidates[0]

    async def run(self, request: ConversionRequest) -> ConversionResult:
        if self.state is not PipelineState.START:
            raise RuntimeError("ConversionPipeline instances run only once.")
        try:
            result = await self._run(request)
        except ConversionError as exc:
            self.failure = exc
            self._advance(PipelineState.FAILED)
            logger.info("%s failed in %s: %s", self.mode.value, type(exc).__name__, exc)
            raise
        except Exception:
            self._advance(PipelineState.FAILED)
            raise
        logger.info(
            "%s wrote %d bytes to %s",
            self.mode.value,
            result.output_size_bytes,
            result.output_path,
        )
        return result

    async def _run(self, request: ConversionRequest) -> ConversionResult:
        mime_type = self.resolve_mime_type(request.input_path)
        self.input_policy.check_mime_type(mime_type)
        self._advance(PipelineState.MIME_RESOLVED)

        session = await self._session.open(
            request.endpoint_url,
            request.access_ticket.get_secret_value(),
        )
        self._advance(PipelineState.SESSION_OPEN)

        match = self.input_policy.match(session.parameters, mime_type)
        self._advance(PipelineState.PARAMETER_MATCHED)

        data = read_input_bytes(request.input_path)
        asset = await self._uploader.upload(
            session,
            data,
            mime_type,
            match.namespace,
            match.upload_parameter_id,
        )
        self._advance(PipelineState.ASSET_UPLOADED)

        self._advance(PipelineState.JOB_SUBMITTED)
        job_result = await self._job_runner.submit(session, match.bind(asset.id))
        self._advance(PipelineState.JOB_SUCCEEDED)

        item = self.output_policy.select(job_result)
        self._advance(PipelineState.OUTPUT_SELECTED)

        # select() only returns items carrying an href
        payload = await self._downloader.download(str(item.href))
        self._advance(PipelineState.DOWNLOADED)

        digest = write_bytes_to_file(request.output_path, payload)
        self._advance(PipelineState.WRITTEN)
        return ConversionResult(
            output_path=request.output_path,
            source_path=request.input_path,
            mode=self.mode,
            mime_type=mime_type,
            output_sha256=digest,
            output_size_bytes=len(payload),
            asset_id=asset.id,
            parameter_ids=match.parameter_ids,
        )


def build_conversion_request(
    *,
    input_path: Path,
    output_path: Path,
    endpoint_url: str | None,
    access_ticket: str | None,
) -> ConversionRequest:
    """Validate request fields, raising ``ConfigurationError`` on bad input."""
    if not endpoint_url or not access_ticket:
        raise ConfigurationError("An endpoint URL and an access ticket must both be configured.")
    try:
        return ConversionRequest(
            input_path=input_path,
            output_path=output_path,
            endpoint_url=endpoint_url,
            access_ticket=SecretStr(access_ticket),
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid conversion parameters: {exc}") from exc


def build_conversion_options(
    *,
    http_timeout: float = 30.0,
    job_timeout: float = 600.0,
    poll_interval: float = 1.0,
) -> ConversionOptions:
    """Build typed option object from command/API params."""
    return ConversionOptions(
        http_timeout=http_timeout,
        polling=PollingOptions(
            job_timeout=job_timeout,
            min_interval=min(0.25, poll_interval),
            max_interval=poll_interval,
        ),
    )


async def run_conversion(
    *,
    mode: ConversionMode,
    request: ConversionRequest,
    options: ConversionOptions | None = None,
    client: GeometryBackendClient | None = None,
    session: RemoteSession | None = None,
    uploader: AssetUploader | None = None,
    job_runner: JobRunner | None = None,
    downloader: ArtifactDownloader | None = None,
    mime_resolver: MimeTypeResolver | None = None,
) -> ConversionResult:
    """Use-case: run one remote conversion for ``mode``.

    Ports left unset are backed by ``client``, which is closed when the run
    ends. A fresh client is created when none is given.
    """
    options = options or ConversionOptions()
    input_policy, output_policy = POLICIES[mode]
    async with client or GeometryBackendClient(timeout=options.http_timeout) as backend:
        pipeline = ConversionPipeline(
            mode=mode,
            input_policy=input_policy,
            output_policy=output_policy,
            session=session or BackendRemoteSession(backend),
            uploader=uploader or BackendAssetUploader(backend),
            job_runner=job_runner or BackendJobRunner(backend, options.polling),
            downloader=downloader or BackendArtifactDownloader(backend),
            mime_resolver=mime_resolver or guess_mime_types,
        )
        return await pipeline.run(request)


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
    """Use-case: convert a CAD file to sdTF."""
    request = build_conversion_request(
        input_path=input_path,
        output_path=output_path,
        endpoint_url=endpoint_url,
        access_ticket=access_ticket,
    )
    return await run_conversion(
        mode=ConversionMode.CAD_TO_SDTF,
        request=request,
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
    """Use-case: convert an sdTF file to binary glTF."""
    request = build_conversion_request(
        input_path=input_path,
        output_path=output_path,
        endpoint_url=endpoint_url,
        access_ticket=access_ticket,
    )
    return await run_conversion(
        mode=ConversionMode.SDTF_TO_GLTF,
        request=request,
        options=options,
        session=session,
        uploader=uploader,
        job_runner=job_runner,
        downloader=downloader,
    )


async def inspect_model(
    *,
    endpoint_url: str | None,
    access_ticket: str | None,
    options: ConversionOptions | None = None,
    client: GeometryBackendClient | None = None,
    session: RemoteSession | None = None,
) -> Session:
    """Use-case: open a session and return the model's declared schema."""
    if not endpoint_url or not access_ticket:
        raise ConfigurationError("An endpoint URL and an access ticket must both be configured.")
    try:
        endpoint_url = normalize_endpoint_url(endpoint_url)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid endpoint URL: {exc}") from exc
    if not access_ticket.strip():
        raise ConfigurationError("access_ticket must not be empty.")
    options = options or ConversionOptions()
    async with client or GeometryBackendClient(timeout=options.http_timeout) as backend:
        opener = session or BackendRemoteSession(backend)
        return await opener.open(endpoint_url, access_ticket)

"""Computation adapter implementing the ``JobRunner`` port."""

from __future__ import annotations

import asyncio
import logging

import httpx

from cad_converter.application.options import PollingOptions
from cad_converter.errors import ComputationError, JobTimeoutError
from cad_converter.infrastructure.backend import GeometryBackendClient, JsonObject
from cad_converter.schemas import JobResult, OutputArtifactSet, Session
from cad_converter.types import BindingMap

logger = logging.getLogger(__name__)


def _parse_outputs(payload: JsonObject) -> dict[str, OutputArtifactSet]:
    return JobResult.model_validate({"outputs": payload.get("outputs") or {}}).outputs


def pending_versions(result: JobResult) -> dict[str, str]:
    """Map ids of outputs still computing to the version to ask for."""
    return {
        output_id: output.version or ""
        for output_id, output in result.outputs.items()
        if output.pending
    }


def ensure_computation_succeeded(result: JobResult) -> None:
    """Raise ``ComputationError`` if every output reports a failure status."""
    outputs = result.outputs.values()
    if not outputs or any(output.succeeded for output in outputs):
        return
    failed = {
        output_id: output.computation_status
        for output_id, output in result.outputs.items()
        if output.computation_status is not None
    }
    if failed:
        details = ", ".join(f"{key}={value}" for key, value in failed.items())
        raise ComputationError(f"Computation failed: {details}")


class BackendJobRunner:
    """Submit parameter bindings and poll until no output is pending."""

    def __init__(
        self,
        client: GeometryBackendClient,
        polling: PollingOptions | None = None,
    ) -> None:
        self._client = client
        self._polling = polling or PollingOptions()

    def _next_interval(self, result: JobResult) -> float:
        delays = [output.delay or 0 for output in result.outputs.values() if output.pending]
        requested = max(delays, default=0) / 1000.0
        return min(max(requested, self._polling.min_interval), self._polling.max_interval)

    async def _wait(self, session: Session, bindings: BindingMap) -> JobResult:
        payload = await self._client.customize(session, bindings)
        result = JobResult(outputs=_parse_outputs(payload))
        while pending := pending_versions(result):
            interval = self._next_interval(result)
            logger.debug("%d outputs pending, polling again in %.2fs", len(pending), interval)
            await asyncio.sleep(interval)
            payload = await self._client.get_cached_outputs(session, pending)
            result = JobResult(outputs={**result.outputs, **_parse_outputs(payload)})
        return result

    async def submit(self, session: Session, bindings: BindingMap) -> JobResult:
        """Run the computation and return its terminal outputs.

        Raises
        ------
        ComputationError
            If the service rejects the request or all outputs failed.
        JobTimeoutError
            If the outputs are still pending after ``job_timeout`` seconds.
        """
        timeout = self._polling.job_timeout
        try:
            async with asyncio.timeout(timeout):
                result = await self._wait(session, bindings)
        except TimeoutError as exc:
            raise JobTimeoutError(f"Computation did not finish within {timeout:g}s") from exc
        except httpx.TimeoutException as exc:
            raise JobTimeoutError(f"Computation request timed out: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise ComputationError(
                f"Computation rejected with HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ComputationError(f"Computation request failed: {exc}") from exc
        ensure_computation_succeeded(result)
        return result

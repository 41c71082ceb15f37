"""Error taxonomy for remote conversion runs.

Every error is terminal for the run: nothing in this package catches one of
these to retry. ``exit_code`` is picked up by the CLI when reporting failures.
"""

from __future__ import annotations

import json
from collections.abc import Mapping


class ConversionError(Exception):
    """Base class for all conversion failures."""

    exit_code: int = 1


class ConfigurationError(ConversionError):
    """Endpoint URL, access ticket or request paths are missing or invalid."""

    exit_code = 2


class UnknownMimeType(ConversionError):
    """No mime type could be resolved for the input filename."""

    exit_code = 3


class UnexpectedMimeType(ConversionError):
    """The resolved mime type is not the one the conversion requires."""

    exit_code = 3


class FileIOError(ConversionError):
    """Reading the input or writing the output file failed."""

    exit_code = 4


class SessionInitError(ConversionError):
    """Opening a session against the remote model failed."""

    exit_code = 5


class NoMatchingParameter(ConversionError):
    """The remote model declares no (or no unique) parameter for the input."""

    exit_code = 6


class UploadError(ConversionError):
    """Requesting an upload target or transferring the bytes failed."""

    exit_code = 7


class ComputationError(ConversionError):
    """The remote service reported the computation itself as failed."""

    exit_code = 8


class JobTimeoutError(ConversionError):
    """The computation did not reach a terminal state in time."""

    exit_code = 9


class NoMatchingOutput(ConversionError):
    """No successful output carries the requested content tag."""

    exit_code = 10

    def __init__(self, message: str, outputs: Mapping[str, object] | None = None) -> None:
        super().__init__(message)
        self.outputs: dict[str, object] = dict(outputs or {})

    def dump_outputs(self) -> str:
        """Render the raw output set for diagnostics."""
        return json.dumps(self.outputs, indent=2, default=str)


class DownloadError(ConversionError):
    """Fetching the result artifact failed."""

    exit_code = 11


__all__ = [
    "ComputationError",
    "ConfigurationError",
    "ConversionError",
    "DownloadError",
    "FileIOError",
    "JobTimeoutError",
    "NoMatchingOutput",
    "NoMatchingParameter",
    "SessionInitError",
    "UnexpectedMimeType",
    "UnknownMimeType",
    "UploadError",
]

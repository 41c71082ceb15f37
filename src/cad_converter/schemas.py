"""Pydantic schemas for conversion requests and remote service payloads."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from cad_converter.types import ParameterKind


def normalize_endpoint_url(value: str) -> str:
    """Strip whitespace and trailing slashes; require an http(s) URL."""
    cleaned = value.strip().rstrip("/")
    if not cleaned:
        raise ValueError("endpoint_url must not be empty.")
    if not cleaned.startswith(("http://", "https://")):
        raise ValueError("endpoint_url must be an http(s) URL.")
    return cleaned


class ConversionRequest(BaseModel):
    """Validated input for one remote conversion run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    input_path: Path
    output_path: Path
    endpoint_url: str
    access_ticket: SecretStr

    @field_validator("endpoint_url")
    @classmethod
    def _validate_endpoint_url(cls, value: str) -> str:
        return normalize_endpoint_url(value)

    @field_validator("access_ticket")
    @classmethod
    def _validate_access_ticket(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("access_ticket must not be empty.")
        return value


class ParameterDescriptor(BaseModel):
    """Input slot declared by the remote model."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    name: str | None = None
    raw_type: str = Field(alias="type")
    accepted_formats: frozenset[str] = Field(default_factory=frozenset, alias="format")

    @field_validator("accepted_formats", mode="before")
    @classmethod
    def _normalize_formats(cls, value: object) -> object:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset({value})
        return value

    @property
    def kind(self) -> ParameterKind:
        return ParameterKind.classify(self.raw_type)

    def accepts(self, mime_type: str) -> bool:
        """Return ``True`` if the parameter declares ``mime_type`` as a format."""
        return mime_type in self.accepted_formats


class OutputItem(BaseModel):
    """One retrievable content item of an output."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    format: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")
    href: str | None = None


class OutputArtifactSet(BaseModel):
    """Per-output computation result."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    id: str
    name: str | None = None
    version: str | None = None
    computation_status: str | None = Field(default=None, alias="status_computation")
    items: tuple[OutputItem, ...] = Field(default=(), alias="content")
    delay: int | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _normalize_items(cls, value: object) -> object:
        return () if value is None else value

    @property
    def succeeded(self) -> bool:
        return self.computation_status == "success"

    @property
    def pending(self) -> bool:
        """Whether the service asked us to come back later for this output."""
        return self.delay is not None


class Session(BaseModel):
    """Remote session handle plus the model's declared schema."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    endpoint_url: str = ""
    parameters: dict[str, ParameterDescriptor] = Field(default_factory=dict)
    outputs: dict[str, OutputArtifactSet] = Field(default_factory=dict)

    @field_validator("parameters", "outputs", mode="before")
    @classmethod
    def _normalize_mapping(cls, value: object) -> object:
        return {} if value is None else value


class UploadedAsset(BaseModel):
    """Remote reference to an uploaded input, usable as a parameter value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    href: str
    format: str


class JobResult(BaseModel):
    """Terminal outputs of one computation request."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    outputs: dict[str, OutputArtifactSet] = Field(default_factory=dict)

    def raw_outputs(self) -> dict[str, object]:
        """Return outputs in the service's own field naming, for diagnostics."""
        return {
            output_id: output.model_dump(mode="json", by_alias=True, exclude_none=True)
            for output_id, output in self.outputs.items()
        }

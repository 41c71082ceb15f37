"""Configuration settings using pydantic-settings."""

from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cad_converter.errors import ConfigurationError
from cad_converter.types import ConversionMode


class ConverterSettings(BaseSettings):
    """Endpoint, tickets and timeouts read from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model_view_url: str | None = Field(default=None, validation_alias="MODEL_VIEW_URL")
    ticket_cad_to_sdtf: SecretStr | None = Field(
        default=None,
        validation_alias="BACKEND_TICKET_CAD_TO_SDTF",
    )
    ticket_sdtf_to_gltf: SecretStr | None = Field(
        default=None,
        validation_alias="BACKEND_TICKET_SDTF_TO_GLTF",
    )
    http_timeout: float = Field(
        default=30.0,
        gt=0.0,
        validation_alias=AliasChoices("CONVERTER_HTTP_TIMEOUT", "http_timeout"),
    )
    job_timeout: float = Field(
        default=600.0,
        gt=0.0,
        validation_alias=AliasChoices("CONVERTER_JOB_TIMEOUT", "job_timeout"),
    )
    poll_interval: float = Field(
        default=1.0,
        gt=0.0,
        validation_alias=AliasChoices("CONVERTER_POLL_INTERVAL", "poll_interval"),
    )

    def ticket_for(self, mode: ConversionMode) -> str | None:
        """Return the backend ticket configured for ``mode``."""
        ticket = (
            self.ticket_cad_to_sdtf
            if mode is ConversionMode.CAD_TO_SDTF
            else self.ticket_sdtf_to_gltf
        )
        return ticket.get_secret_value() if ticket is not None else None


def load_settings() -> ConverterSettings:
    """Load settings, converting validation failures to ``ConfigurationError``."""
    try:
        return ConverterSettings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid converter configuration: {exc}") from exc

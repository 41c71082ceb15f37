"""Typed option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PollingOptions:
    """Completion polling configuration for computation requests."""

    job_timeout: float = 600.0
    min_interval: float = 0.25
    max_interval: float = 1.0


@dataclass(frozen=True)
class ConversionOptions:
    """Shared conversion options passed through use-cases."""

    http_timeout: float = 30.0
    polling: PollingOptions = PollingOptions()

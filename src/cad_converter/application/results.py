"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cad_converter.types import ConversionMode


@dataclass(frozen=True)
class ConversionResult:
    """Structured conversion outcome."""

    output_path: Path
    source_path: Path
    mode: ConversionMode
    mime_type: str
    output_sha256: str
    output_size_bytes: int
    asset_id: str
    parameter_ids: tuple[str, ...]

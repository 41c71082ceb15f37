"""Public file-based conversion API (delegates to application use-cases)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from cad_converter.application.results import ConversionResult
from cad_converter.application.use_cases import (
    build_conversion_options,
    convert_cad_to_sdtf,
    convert_sdtf_to_gltf,
    inspect_model,
)
from cad_converter.schemas import Session


def convert_cad_file_to_sdtf(
    input_path: Path,
    output_path: Path,
    endpoint_url: Optional[str],
    access_ticket: Optional[str],
    http_timeout: float = 30.0,
    job_timeout: float = 600.0,
    poll_interval: float = 1.0,
) -> ConversionResult:
    """Convert a CAD file to sdTF through the remote converter model."""
    options = build_conversion_options(
        http_timeout=http_timeout,
        job_timeout=job_timeout,
        poll_interval=poll_interval,
    )
    return asyncio.run(
        convert_cad_to_sdtf(
            input_path=input_path,
            output_path=output_path,
            endpoint_url=endpoint_url,
            access_ticket=access_ticket,
            options=options,
        )
    )


def convert_sdtf_file_to_gltf(
    input_path: Path,
    output_path: Path,
    endpoint_url: Optional[str],
    access_ticket: Optional[str],
    http_timeout: float = 30.0,
    job_timeout: float = 600.0,
    poll_interval: float = 1.0,
) -> ConversionResult:
    """Convert an sdTF file to binary glTF through the remote converter model."""
    options = build_conversion_options(
        http_timeout=http_timeout,
        job_timeout=job_timeout,
        poll_interval=poll_interval,
    )
    return asyncio.run(
        convert_sdtf_to_gltf(
            input_path=input_path,
            output_path=output_path,
            endpoint_url=endpoint_url,
            access_ticket=access_ticket,
            options=options,
        )
    )


def describe_remote_model(
    endpoint_url: Optional[str],
    access_ticket: Optional[str],
    http_timeout: float = 30.0,
) -> Session:
    """Open a session and return the declared parameters and outputs."""
    options = build_conversion_options(http_timeout=http_timeout)
    return asyncio.run(
        inspect_model(
            endpoint_url=endpoint_url,
            access_ticket=access_ticket,
            options=options,
        )
    )

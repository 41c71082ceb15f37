"""Top-level API for remote CAD conversion."""

from __future__ import annotations

from pathlib import Path

__version__ = "0.1.0"


def convert_file(
    mode: str,
    input_path: Path,
    output_path: Path,
    *,
    endpoint_url: str | None = None,
    access_ticket: str | None = None,
) -> Path:
    """Convert ``input_path`` remotely and return the written output path.

    Parameters
    ----------
    mode : {"cad-to-sdtf", "sdtf-to-gltf"}
        Conversion to run.
    input_path : Path
        Local file to upload.
    output_path : Path
        Destination of the downloaded result; overwritten if present.
    endpoint_url : str | None, default=None
        Model view URL. Falls back to ``MODEL_VIEW_URL``.
    access_ticket : str | None, default=None
        Backend ticket of the converter model. Falls back to the
        ``BACKEND_TICKET_*`` variable of ``mode``.

    Returns
    -------
    Path
        Path of the written result.
    """
    from .api import convert_cad_file_to_sdtf, convert_sdtf_file_to_gltf
    from .settings import load_settings
    from .types import ConversionMode

    conversion_mode = ConversionMode(mode)
    settings = load_settings()
    _impl = (
        convert_cad_file_to_sdtf
        if conversion_mode is ConversionMode.CAD_TO_SDTF
        else convert_sdtf_file_to_gltf
    )
    result = _impl(
        input_path=input_path,
        output_path=output_path,
        endpoint_url=endpoint_url or settings.model_view_url,
        access_ticket=access_ticket or settings.ticket_for(conversion_mode),
        http_timeout=settings.http_timeout,
        job_timeout=settings.job_timeout,
        poll_interval=settings.poll_interval,
    )
    return result.output_path


__all__ = ["convert_file"]

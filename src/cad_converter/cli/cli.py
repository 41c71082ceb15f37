#!/usr/bin/env python3
"""
cad_converter.cli.cli

Typer-based CLI for converting design files through remote converter models.

Endpoint URL and backend tickets are read from the environment or a ``.env``
file in the working directory:

    MODEL_VIEW_URL=https://sdr8euc1.eu-central-1.shapediver.com
    BACKEND_TICKET_CAD_TO_SDTF=...
    BACKEND_TICKET_SDTF_TO_GLTF=...

Examples
--------
Convert a STEP file to sdTF:

    cad-convert cad-to-sdtf part.step part.sdtf

Convert the sdTF to binary glTF:

    cad-convert sdtf-to-gltf part.sdtf part.glb
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

import typer

from cad_converter.errors import ConversionError, NoMatchingOutput
from cad_converter.types import ConversionMode

app = typer.Typer(
    name="cad-convert",
    help="Convert CAD and sdTF files with remote converter models.",
    no_args_is_help=True,
)

ENDPOINT_HELP = "Model view URL (overrides MODEL_VIEW_URL)."
TICKET_HELP = "Backend ticket of the converter model (overrides BACKEND_TICKET_*)."
OUTPUT_HELP = "Where to write the result; an existing file is overwritten."


def _configure_logging(verbose: bool) -> None:
    """Route library logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Request lines carry the access ticket in the session-open URL.
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _print_conversion_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly conversion error.

    Parameters
    ----------
    exc : Exception
        Exception raised during conversion.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"[red]✗ {type(exc).__name__}:[/red] {exc}", err=True)
    if isinstance(exc, NoMatchingOutput):
        typer.echo("Outputs reported by the remote model:", err=True)
        typer.echo(exc.dump_outputs(), err=True)
    if debug:
        typer.echo("\n[dim]Traceback:[/dim]", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _run_conversion(
    ctx: typer.Context,
    mode: ConversionMode,
    input_path: Path,
    output_path: Path,
    endpoint: str | None,
    ticket: str | None,
) -> None:
    """Resolve configuration, convert, and report the outcome."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        from cad_converter import api
        from cad_converter.settings import load_settings

        settings = load_settings()
        convert = (
            api.convert_cad_file_to_sdtf
            if mode is ConversionMode.CAD_TO_SDTF
            else api.convert_sdtf_file_to_gltf
        )
        result = convert(
            input_path=input_path,
            output_path=output_path,
            endpoint_url=endpoint or settings.model_view_url,
            access_ticket=ticket or settings.ticket_for(mode),
            http_timeout=settings.http_timeout,
            job_timeout=settings.job_timeout,
            poll_interval=settings.poll_interval,
        )
        typer.echo(f"[green]✓ Saved:[/green] {result.output_path}")
        typer.echo(f"  size: {result.output_size_bytes} bytes")
        typer.echo(f"  sha256: {result.output_sha256}")
    except ConversionError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_conversion_error(exc, debug))


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Initialize shared CLI state."""
    _configure_logging(verbose)
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("cad-to-sdtf")
def cad_to_sdtf_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="CAD file to convert (.step, .iges, .3dm, .dwg, ...).",
    ),
    output_path: Path = typer.Argument(..., help=OUTPUT_HELP),
    endpoint: str | None = typer.Option(None, "--endpoint", help=ENDPOINT_HELP),
    ticket: str | None = typer.Option(None, "--ticket", help=TICKET_HELP),
) -> None:
    """Convert a CAD file to sdTF.

    Notes
    -----
    - The converter model must declare exactly one ``File`` parameter
      accepting the input's mime type.
    """
    _run_conversion(ctx, ConversionMode.CAD_TO_SDTF, input_path, output_path, endpoint, ticket)


@app.command("sdtf-to-gltf")
def sdtf_to_gltf_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="sdTF file to convert.",
    ),
    output_path: Path = typer.Argument(..., help=OUTPUT_HELP),
    endpoint: str | None = typer.Option(None, "--endpoint", help=ENDPOINT_HELP),
    ticket: str | None = typer.Option(None, "--ticket", help=TICKET_HELP),
) -> None:
    """Convert an sdTF file to binary glTF.

    Notes
    -----
    - The upload is bound to every structured-data parameter of the model.
    """
    _run_conversion(ctx, ConversionMode.SDTF_TO_GLTF, input_path, output_path, endpoint, ticket)


app.command("cad-to-intermediate", hidden=True)(cad_to_sdtf_cmd)
app.command("intermediate-to-display", hidden=True)(sdtf_to_gltf_cmd)


@app.command("inspect")
def inspect_cmd(
    ctx: typer.Context,
    mode: ConversionMode = typer.Argument(..., help="Conversion whose model to inspect."),
    endpoint: str | None = typer.Option(None, "--endpoint", help=ENDPOINT_HELP),
    ticket: str | None = typer.Option(None, "--ticket", help=TICKET_HELP),
) -> None:
    """Print the parameters and outputs declared by a converter model."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        from cad_converter import api
        from cad_converter.settings import load_settings

        settings = load_settings()
        session = api.describe_remote_model(
            endpoint_url=endpoint or settings.model_view_url,
            access_ticket=ticket or settings.ticket_for(mode),
            http_timeout=settings.http_timeout,
        )
    except ConversionError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))

    typer.echo(f"session: {session.session_id}")
    typer.echo("parameters:")
    for param in session.parameters.values():
        formats = ", ".join(sorted(param.accepted_formats)) or "-"
        typer.echo(f"  {param.id} [{param.raw_type} / {param.kind.value}] formats: {formats}")
    typer.echo("outputs:")
    for output in session.outputs.values():
        typer.echo(f"  {output.id} ({output.name or '-'})")


if __name__ == "__main__":
    app()

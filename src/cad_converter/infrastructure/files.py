"""Local file access for conversion inputs and outputs."""

from __future__ import annotations

from hashlib import sha256
from pathlib import Path

from cad_converter.errors import FileIOError


def digest_bytes(data: bytes) -> str:
    """Compute SHA-256 digest for byte payload."""
    return sha256(data).hexdigest()


def read_input_bytes(path: Path) -> bytes:
    """Read the whole input file into memory."""
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileIOError(f"Could not read input file {path}: {exc}") from exc


def write_bytes_to_file(path: Path, data: bytes) -> str:
    """Write bytes to file, replacing any existing content, and return SHA-256 digest."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise FileIOError(f"Could not write output file {path}: {exc}") from exc
    return digest_bytes(data)

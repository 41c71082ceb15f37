"""Filename based mime type lookup for design and model files."""

from __future__ import annotations

import mimetypes
from pathlib import Path

# Ordered candidates; the first entry is the canonical type for the extension.
_DESIGN_MIME_TYPES: dict[str, tuple[str, ...]] = {
    "3dm": ("model/vnd.3dm", "application/x-3dm"),
    "3ds": ("application/x-3ds", "image/x-3ds"),
    "dwg": ("application/acad", "image/vnd.dwg", "application/dwg"),
    "dxf": ("application/dxf", "image/vnd.dxf"),
    "fbx": ("application/octet-stream",),
    "glb": ("model/gltf-binary",),
    "gltf": ("model/gltf+json",),
    "iges": ("model/iges", "application/iges"),
    "igs": ("model/iges", "application/iges"),
    "obj": ("model/obj", "application/wavefront-obj"),
    "ply": ("model/ply", "application/ply"),
    "sdtf": ("model/vnd.sdtf",),
    "skp": ("application/vnd.sketchup.skp",),
    "step": ("model/step", "application/step"),
    "stp": ("model/step", "application/step"),
    "stl": ("model/stl", "application/sla"),
    "usdz": ("model/vnd.usdz+zip",),
    "x_t": ("application/x-parasolid",),
    "x_b": ("application/x-parasolid",),
}


def guess_mime_types(path: str | Path) -> list[str]:
    """Return candidate mime types for ``path``, most specific first.

    An empty list means the extension is not recognized.
    """
    extension = Path(path).suffix.lower().lstrip(".")
    if not extension:
        return []
    known = _DESIGN_MIME_TYPES.get(extension)
    if known:
        return list(known)
    guessed, _encoding = mimetypes.guess_type(f"file.{extension}", strict=False)
    return [guessed] if guessed else []

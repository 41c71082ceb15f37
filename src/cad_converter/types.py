"""Shared enumerations and type aliases for conversion modules."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

STRUCTURED_DATA_TYPE_PREFIX = "s"
SDTF_MIME_TYPE = "model/vnd.sdtf"


class ConversionMode(StrEnum):
    """Conversions offered by this package."""

    CAD_TO_SDTF = "cad-to-sdtf"
    SDTF_TO_GLTF = "sdtf-to-gltf"


class ParameterKind(StrEnum):
    """Discriminates remote model parameters by what they accept."""

    FILE = "file-input"
    STRUCTURED_DATA = "structured-data-input"
    OTHER = "other"

    @classmethod
    def classify(cls, raw_type: str) -> ParameterKind:
        """Map a remote parameter type name onto a kind.

        ``File`` parameters take uploaded files; structured-data parameters
        are the ``s``-prefixed types (``sMesh``, ``sPoint``, ...).
        """
        if raw_type == "File":
            return cls.FILE
        if raw_type.startswith(STRUCTURED_DATA_TYPE_PREFIX):
            return cls.STRUCTURED_DATA
        return cls.OTHER


class OutputContentTag(StrEnum):
    """Content identifiers used to pick a result item."""

    SDTF = "sdtf"
    GLTF_BINARY = "model/gltf-binary"


class AssetNamespace(StrEnum):
    """Upload namespace an asset is requested in."""

    FILE = "file"
    SDTF = "sdtf"


type ParameterValue = str | int | float | bool
type BindingMap = Mapping[str, ParameterValue]
type MutableBindingMap = dict[str, ParameterValue]

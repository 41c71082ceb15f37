"""Input-parameter matching and output selection policies.

The two conversions share one pipeline and differ only in how the uploaded
asset is bound to the remote model's parameters and in how the result item is
picked from the computed outputs. Input matching insists on an unambiguous
match for file parameters, while output selection takes the first successful
output carrying the requested content.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import ClassVar, Protocol

from cad_converter.errors import NoMatchingOutput, NoMatchingParameter, UnexpectedMimeType
from cad_converter.schemas import JobResult, OutputItem, ParameterDescriptor
from cad_converter.types import (
    SDTF_MIME_TYPE,
    AssetNamespace,
    MutableBindingMap,
    OutputContentTag,
    ParameterKind,
)

type ItemPredicate = Callable[[OutputItem], bool]


@dataclass(frozen=True)
class ParameterMatch:
    """Parameters the uploaded asset will be bound to."""

    namespace: AssetNamespace
    parameters: tuple[ParameterDescriptor, ...]

    @property
    def parameter_ids(self) -> tuple[str, ...]:
        return tuple(param.id for param in self.parameters)

    @property
    def upload_parameter_id(self) -> str:
        """Parameter the upload request is scoped to."""
        return self.parameters[0].id

    def bind(self, asset_id: str) -> MutableBindingMap:
        """Bind ``asset_id`` to every matched parameter."""
        return {param.id: asset_id for param in self.parameters}


class InputParameterPolicy(Protocol):
    """Select the parameters receiving the uploaded input."""

    namespace: AssetNamespace

    def check_mime_type(self, mime_type: str) -> None:
        """Raise before any network call if ``mime_type`` is not acceptable."""

    def match(
        self,
        parameters: Mapping[str, ParameterDescriptor],
        mime_type: str,
    ) -> ParameterMatch:
        """Return the parameters to bind, or raise ``NoMatchingParameter``."""


def is_file_parameter_for(param: ParameterDescriptor, mime_type: str) -> bool:
    """Return whether ``param`` is a file input accepting ``mime_type``."""
    return param.kind is ParameterKind.FILE and param.accepts(mime_type)


def is_structured_data_parameter(param: ParameterDescriptor) -> bool:
    """Return whether ``param`` takes structured data."""
    return param.kind is ParameterKind.STRUCTURED_DATA


@dataclass(frozen=True)
class FileParameterPolicy:
    """Bind the single file parameter accepting the input's mime type."""

    namespace: ClassVar[AssetNamespace] = AssetNamespace.FILE

    def check_mime_type(self, mime_type: str) -> None:
        del mime_type

    def match(
        self,
        parameters: Mapping[str, ParameterDescriptor],
        mime_type: str,
    ) -> ParameterMatch:
        candidates = tuple(
            param for param in parameters.values() if is_file_parameter_for(param, mime_type)
        )
        if not candidates:
            raise NoMatchingParameter(
                f"Could not find file parameter that supports mime type {mime_type}"
            )
        if len(candidates) > 1:
            ids = ", ".join(param.id for param in candidates)
            raise NoMatchingParameter(
                f"Found {len(candidates)} file parameters supporting mime type "
                f"{mime_type} ({ids}); expected exactly one"
            )
        return ParameterMatch(namespace=self.namespace, parameters=candidates)


@dataclass(frozen=True)
class StructuredDataParameterPolicy:
    """Bind one structured-data upload to all structured-data parameters."""

    namespace: ClassVar[AssetNamespace] = AssetNamespace.SDTF
    expected_mime_type: str = SDTF_MIME_TYPE

    def check_mime_type(self, mime_type: str) -> None:
        if mime_type != self.expected_mime_type:
            raise UnexpectedMimeType(
                f"Expected mime type '{self.expected_mime_type}' but got {mime_type}"
            )

    def match(
        self,
        parameters: Mapping[str, ParameterDescriptor],
        mime_type: str,
    ) -> ParameterMatch:
        del mime_type
        candidates = tuple(
            param for param in parameters.values() if is_structured_data_parameter(param)
        )
        if not candidates:
            raise NoMatchingParameter("Could not find any structured-data parameters")
        return ParameterMatch(namespace=self.namespace, parameters=candidates)


def format_is(tag: OutputContentTag) -> ItemPredicate:
    """Predicate matching items by their ``format`` field."""

    def _predicate(item: OutputItem) -> bool:
        return item.format == tag.value

    return _predicate


def content_type_is(tag: OutputContentTag) -> ItemPredicate:
    """Predicate matching items by their ``contentType`` field."""

    def _predicate(item: OutputItem) -> bool:
        return item.content_type == tag.value

    return _predicate


@dataclass(frozen=True)
class OutputSelectionPolicy:
    """Pick the result item out of computed outputs."""

    label: str
    predicate: ItemPredicate

    def find_item(self, items: tuple[OutputItem, ...]) -> OutputItem | None:
        return next(
            (item for item in items if item.href and self.predicate(item)),
            None,
        )

    def select(self, result: JobResult) -> OutputItem:
        """Return the first matching item of the first successful output."""
        for output in result.outputs.values():
            if not output.succeeded:
                continue
            item = self.find_item(output.items)
            if item is not None:
                return item
        raise NoMatchingOutput(
            f"No resulting {self.label} file found",
            outputs=result.raw_outputs(),
        )


SDTF_RESULT = OutputSelectionPolicy(label="sdTF", predicate=format_is(OutputContentTag.SDTF))
GLTF_RESULT = OutputSelectionPolicy(
    label="glTF",
    predicate=content_type_is(OutputContentTag.GLTF_BINARY),
)

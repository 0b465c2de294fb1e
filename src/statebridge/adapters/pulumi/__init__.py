"""Public interface for the Pulumi adapter."""

from __future__ import annotations

from .runner import (
    PulumiPreviewRunner,
    load_import_file,
    read_project_name,
    write_import_file,
)
from .schema import ImportFile, ImportResource, PreviewOutput, PreviewStep
from .translator import (
    candidates_from_import_file,
    classify_operation,
    preview_statuses,
    resolved_import_file,
)
from .type_mapping import JsonMappingLoader, TypeMapper, TypeMappingNotFoundError

__all__ = [
    "ImportFile",
    "ImportResource",
    "JsonMappingLoader",
    "PreviewOutput",
    "PreviewStep",
    "PulumiPreviewRunner",
    "TypeMapper",
    "TypeMappingNotFoundError",
    "candidates_from_import_file",
    "classify_operation",
    "load_import_file",
    "preview_statuses",
    "read_project_name",
    "resolved_import_file",
    "write_import_file",
]

"""Translate Pulumi CLI documents into domain values."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from statebridge.domain.model import CandidateImportRecord
from statebridge.domain.status import PreviewOp

if TYPE_CHECKING:
    from statebridge.domain.imports import ImportResolution

    from .schema import ImportFile, ImportResource, PreviewOutput

log = getLogger(__name__)

# Steps that only describe the mechanics of a replacement.
_IGNORED_OPS: Final[frozenset[str]] = frozenset(
    {"create-replacement", "delete-replaced", "discard-replaced", "remove-pending-replace"}
)


def classify_operation(op: str) -> PreviewOp | None:
    try:
        return PreviewOp(op)
    except ValueError:
        if op not in _IGNORED_OPS:
            log.debug("Ignoring unexpected preview operation %r", op)
        return None


def preview_statuses(output: PreviewOutput) -> dict[str, PreviewOp]:
    """Map each URN to its first classified preview operation."""

    statuses: dict[str, PreviewOp] = {}
    for step in output.steps:
        if step.urn in statuses:
            continue
        op = classify_operation(step.op)
        if op is not None:
            statuses[step.urn] = op
    return statuses


def to_candidate(resource: ImportResource) -> CandidateImportRecord:
    return CandidateImportRecord(
        kind=resource.type,
        name=resource.name,
        logical_name=resource.logical_name or None,
        import_id=resource.id or None,
        component=resource.component,
    )


def candidates_from_import_file(document: ImportFile) -> tuple[CandidateImportRecord, ...]:
    return tuple(to_candidate(resource) for resource in document.resources)


def resolved_import_file(stubs: ImportFile, resolution: ImportResolution) -> ImportFile:
    """Copy of ``stubs`` keeping components and stubs bound to an import ID.

    Stub order is preserved; bound stubs get the directive's import ID.
    """

    import_ids = {
        (directive.kind, directive.name): directive.import_id
        for directive in resolution.directives
        if directive.import_id
    }
    resources: list[ImportResource] = []
    for stub in stubs.resources:
        if stub.component:
            resources.append(stub)
            continue
        import_id = import_ids.get((stub.type, stub.name))
        if import_id is not None:
            resources.append(stub.model_copy(update={"id": import_id}))
    return stubs.model_copy(update={"resources": resources})

"""Translate Terraform state documents into resource descriptors."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from statebridge.domain.errors import InventoryParseError
from statebridge.domain.model import ResourceDescriptor

from .schema import StateDocument

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .schema import StateModule, StateResource


def parse_state_document(payload: object) -> StateDocument:
    try:
        return StateDocument.model_validate(payload)
    except PydanticValidationError as exc:
        raise InventoryParseError(f"Malformed state document: {exc}") from exc


def list_managed_resources(
    snapshot: StateDocument | Mapping[str, object] | None,
) -> tuple[ResourceDescriptor, ...]:
    """Flatten a state snapshot into managed resources in discovery order.

    The root module's resources come first, then each child module
    depth-first. Data sources are excluded; an absent snapshot is empty.
    """

    if snapshot is None:
        return ()
    document = snapshot if isinstance(snapshot, StateDocument) else _parse(snapshot)
    if document.values is None or document.values.root_module is None:
        return ()
    return tuple(
        to_descriptor(resource, module_address=module.address)
        for module, resource in _walk(document.values.root_module)
        if resource.is_managed
    )


def _parse(snapshot: object) -> StateDocument:
    if not isinstance(snapshot, Mapping):
        raise InventoryParseError(
            f"State snapshot must be an object, got {type(snapshot).__name__}"
        )
    return parse_state_document(snapshot)


def _walk(module: StateModule) -> Iterator[tuple[StateModule, StateResource]]:
    for resource in module.resources:
        yield module, resource
    for child in module.child_modules:
        yield from _walk(child)


def to_descriptor(resource: StateResource, *, module_address: str | None) -> ResourceDescriptor:
    return ResourceDescriptor(
        address=resource.address,
        kind=resource.type,
        provider_namespace=resource.provider_name,
        name=resource.name,
        module_address=module_address,
        is_managed=resource.is_managed,
        attributes=MappingProxyType(dict(resource.values or {})),
    )

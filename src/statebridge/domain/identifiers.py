"""Parsing and rewriting of target-system identifiers (Pulumi URNs)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final, Self

from .errors import ValidationError

URN_PREFIX: Final[str] = "urn:pulumi:"
_SEPARATOR: Final[str] = "::"


@dataclass(frozen=True, slots=True)
class Urn:
    """``urn:pulumi:<stack>::<project>::<qualified type>::<name>``.

    The qualified type may carry parent types joined with ``$``; ``kind`` is
    the last segment of that chain.
    """

    stack: str
    project: str
    qualified_type: str
    name: str

    @classmethod
    def parse(cls, value: str) -> Self:
        if not value.startswith(URN_PREFIX):
            raise ValidationError(f"invalid URN {value!r}: missing {URN_PREFIX!r} prefix")
        parts = value.removeprefix(URN_PREFIX).split(_SEPARATOR, 3)
        if len(parts) != 4:
            raise ValidationError(f"invalid URN {value!r}: expected 4 '::'-separated parts")
        stack, project, qualified_type, name = parts
        if not stack or not project or not qualified_type:
            raise ValidationError(f"invalid URN {value!r}: empty stack, project or type")
        return cls(stack=stack, project=project, qualified_type=qualified_type, name=name)

    @property
    def kind(self) -> str:
        return self.qualified_type.rsplit("$", 1)[-1]

    def with_stack(self, stack: str) -> Self:
        return replace(self, stack=stack)

    def render(self) -> str:
        return URN_PREFIX + _SEPARATOR.join(
            (self.stack, self.project, self.qualified_type, self.name)
        )

    def __str__(self) -> str:
        return self.render()


def try_parse_urn(value: str | None) -> Urn | None:
    if not value:
        return None
    try:
        return Urn.parse(value)
    except ValidationError:
        return None

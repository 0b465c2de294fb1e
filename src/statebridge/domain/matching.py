"""Identity matching between ledger entries and target-system candidates.

Exact matching decides import bindings. Partial matching only feeds
"did you mean" suggestions shown to the operator and never drives an
automated decision.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import replace
from functools import cache
from typing import TYPE_CHECKING

from .identifiers import URN_PREFIX, try_parse_urn

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import CandidateImportRecord, MappingEntry

_NON_ALNUM = re.compile(r"[^0-9a-z]+")
_MAX_EDIT_DISTANCE = 3


@cache
def derive_expected_identifier(project: str, group: str, kind: str, name: str) -> str:
    """Return the URN the target system assigns to ``name`` of type ``kind``."""

    return f"{URN_PREFIX}{group}::{project}::{kind}::{name}"


def expected_identifier_for(
    candidate: CandidateImportRecord, *, project: str, group: str
) -> str:
    return derive_expected_identifier(project, group, candidate.kind, candidate.display_name)


def suggested_identifier(
    entry: MappingEntry, candidate: CandidateImportRecord, *, project: str, group: str
) -> str:
    """Identifier to offer for ``entry`` when ``candidate`` is a near miss.

    The entry's parent type chain is kept, only the name is swapped.
    """

    urn = try_parse_urn(entry.target_identifier)
    if urn is None or urn.kind != candidate.kind:
        return expected_identifier_for(candidate, project=project, group=group)
    return replace(urn, stack=group, project=project, name=candidate.display_name).render()


def is_match(
    entry: MappingEntry,
    candidate: CandidateImportRecord,
    *,
    project: str,
    group: str,
) -> bool:
    """Exact identity: same stack, project, own type and name.

    Only the last segment of a ``Parent$Child`` type chain takes part, since
    import candidates do not carry their parents' types.
    """

    if not entry.target_identifier:
        return False
    if candidate.target_identifier:
        return candidate.target_identifier == entry.target_identifier
    urn = try_parse_urn(entry.target_identifier)
    if urn is None:
        return False
    return (
        urn.stack == group
        and urn.project == project
        and urn.kind == candidate.kind
        and urn.name == candidate.display_name
    )


def is_partial_match(entry: MappingEntry, candidate: CandidateImportRecord) -> bool:
    """Same kind, different but similar name."""

    urn = try_parse_urn(entry.target_identifier)
    if urn is None or urn.kind != candidate.kind:
        return False
    if urn.name == candidate.display_name:
        return False
    return names_are_similar(urn.name, candidate.display_name)


def normalize_name(value: str) -> str:
    folded = unicodedata.normalize("NFKC", value).casefold()
    return _NON_ALNUM.sub("", folded)


def edit_distance(left: str, right: str) -> int:
    """Levenshtein distance between two strings."""

    if len(left) < len(right):
        left, right = right, left
    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (left_char != right_char),
                )
            )
        previous = current
    return previous[-1]


def names_are_similar(left: str, right: str) -> bool:
    a, b = normalize_name(left), normalize_name(right)
    if not a or not b:
        return False
    if a in b or b in a:
        return True
    threshold = min(_MAX_EDIT_DISTANCE, max(1, min(len(a), len(b)) // 4))
    return edit_distance(a, b) <= threshold


def _name_distance(entry: MappingEntry, candidate: CandidateImportRecord) -> int:
    urn = try_parse_urn(entry.target_identifier)
    name = urn.name if urn is not None else ""
    return edit_distance(normalize_name(name), normalize_name(candidate.display_name))


def rank_partial_matches(
    candidate: CandidateImportRecord, entries: Iterable[MappingEntry]
) -> list[MappingEntry]:
    """Entries that partially match ``candidate``, closest names first."""

    partial = [entry for entry in entries if is_partial_match(entry, candidate)]
    return sorted(partial, key=lambda entry: _name_distance(entry, candidate))


def rank_partial_candidates(
    entry: MappingEntry, candidates: Iterable[CandidateImportRecord]
) -> list[CandidateImportRecord]:
    """Candidates that partially match ``entry``, closest names first."""

    partial = [candidate for candidate in candidates if is_partial_match(entry, candidate)]
    return sorted(partial, key=lambda candidate: _name_distance(entry, candidate))

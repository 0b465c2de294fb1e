"""Human-facing text reports for CLI output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from statebridge.domain.integrity import CheckCategory
from statebridge.domain.status import (
    NotTracked,
    Skipped,
    Translated,
    TranslatedStatus,
    addresses_with,
)

if TYPE_CHECKING:
    from pathlib import Path

    from statebridge.app import GroupDiff, ImportReport
    from statebridge.domain.advice import NextStep
    from statebridge.domain.drafting import LedgerDraft
    from statebridge.domain.guard import MutationReport
    from statebridge.domain.integrity import CheckResult

CATEGORY_TITLES: Final[dict[CheckCategory, str]] = {
    CheckCategory.FILE_EXISTENCE: "File Existence Errors",
    CheckCategory.UNIQUE_MAPPING: "Unique Mapping Errors",
    CheckCategory.STATE_CONSISTENCY: "State Consistency Errors",
}


def format_check_report(result: CheckResult) -> str:
    if not result.has_errors:
        return "✓ All integrity checks passed"

    lines = [f"✗ Found {result.count} integrity issue(s):"]
    for category, errors in result.by_category().items():
        lines.extend(["", f"## {CATEGORY_TITLES[category]}"])
        lines.extend(f"  • {error.message}" for error in errors)
        suggestion = next((error.suggestion for error in errors if error.suggestion), None)
        if suggestion:
            lines.append(f"  → Example resolution: {suggestion}")
    return "\n".join(lines)


def format_mutation_report(report: MutationReport[int], *, action: str) -> str:
    lines = [action]
    if report.introduced:
        lines.append(
            f"Warning: introduced {report.introduced} new integrity error(s) (--force was used)"
        )
    elif report.fixed:
        lines.append(f"Fixed {report.fixed} integrity error(s)")
    return "\n".join(lines)


def format_diff_summary(diff: GroupDiff, *, details: bool = False) -> str:
    summary = diff.summary
    lines = [
        f"Stack: {diff.group}",
        f"  Total resources:   {summary.total}",
        f"  Fully migrated:    {summary.migrated}",
        f"  Skipped:           {summary.skipped}",
        f"  Not tracked:       {summary.not_tracked}",
        f"  Translated:        {summary.translated_total}",
        f"    no state:        {summary.translated[TranslatedStatus.NO_STATE]}",
        f"    needs update:    {summary.translated[TranslatedStatus.NEEDS_UPDATE]}",
        f"    needs replace:   {summary.translated[TranslatedStatus.NEEDS_REPLACE]}",
    ]
    if details:
        sections = [
            ("Skipped", addresses_with(diff.statuses, lambda s: isinstance(s, Skipped))),
            ("Not tracked", addresses_with(diff.statuses, lambda s: isinstance(s, NotTracked))),
        ]
        sections.extend(
            (
                f"Translated ({sub_status})",
                addresses_with(
                    diff.statuses,
                    lambda s, sub=sub_status: isinstance(s, Translated) and s.sub_status is sub,
                ),
            )
            for sub_status in TranslatedStatus
        )
        for title, addresses in sections:
            if addresses:
                lines.extend(["", f"  {title}:"])
                lines.extend(f"    - {address}" for address in addresses)
    return "\n".join(lines)


def format_import_report(report: ImportReport) -> str:
    resolution = report.resolution
    lines = [
        f"Stack: {report.group}",
        f"  Stubs:       {report.stubs_path}{' (generated)' if report.generated_stubs else ''}",
        f"  Resolved:    {resolution.resolved_count}",
        f"  Unresolved:  {resolution.unresolved_count}",
        f"  Skipped:     {resolution.skipped}",
        f"  Components:  {len(resolution.components)}",
        f"Wrote {report.output_path}",
    ]
    for entry in resolution.unresolved:
        lines.append(f"  • {entry.address}: {entry.reason}")
        lines.extend(f"    did you mean {suggestion}?" for suggestion in entry.suggestions)
    return "\n".join(lines)


def format_init_report(draft: LedgerDraft, *, ledger_path: Path) -> str:
    lines = [
        f"Stack: {draft.group.name}",
        f"  Entries:     {len(draft.group.entries)}",
        f"  Mapped:      {draft.mapped_count}",
        f"  Unmapped:    {len(draft.unmapped)}",
        f"  Conflicts:   {len(draft.conflicts)}",
        f"Wrote {ledger_path}",
    ]
    unassigned = [*draft.unmapped, *draft.conflicts]
    if unassigned:
        lines.extend(["", "Set a URN for these with set-association:"])
        lines.extend(f"  • {address}" for address in unassigned)
    return "\n".join(lines)


def format_next_step(step: NextStep, *, limit: int = 10) -> str:
    lines = [f"Next: {step.kind}", f"  {step.message}"]
    if step.addresses:
        lines.append("")
        lines.extend(f"    - {address}" for address in step.addresses[:limit])
        if len(step.addresses) > limit:
            lines.append(f"    ... and {len(step.addresses) - limit} more")
    if step.commands:
        lines.append("")
        lines.extend(f"  → {command}" for command in step.commands)
    return "\n".join(lines)

from __future__ import annotations

from typing import TYPE_CHECKING

from statebridge.domain.drafting import default_target_name, draft_group
from statebridge.domain.errors import NotFoundError
from statebridge.domain.integrity import check_integrity
from tests.helpers.ledgers import BUCKET, PROJECT, FakeInventory, descriptor, make_ledger, make_urn

if TYPE_CHECKING:
    from collections.abc import Callable


def _lookup(_provider_namespace: str, kind: str) -> str:
    tokens = {"aws_s3_bucket": BUCKET}
    if kind not in tokens:
        raise NotFoundError(f"no mapping found for resource type {kind}")
    return tokens[kind]


def test_known_types_get_suggested_urns() -> None:
    inventory = [descriptor("aws_s3_bucket.logs"), descriptor("aws_iam_role.app")]

    draft = draft_group(
        "dev", inventory, project=PROJECT, type_lookup=_lookup, state_location="dev.json"
    )

    assert draft.group.state_location == "dev.json"
    assert [(entry.source_address, entry.target_identifier) for entry in draft.group.entries] == [
        ("aws_s3_bucket.logs", make_urn("dev", "logs")),
        ("aws_iam_role.app", None),
    ]
    assert draft.unmapped == ["aws_iam_role.app"]
    assert draft.mapped_count == 1


def test_default_target_name_carries_instance_key() -> None:
    assert default_target_name(descriptor("aws_s3_bucket.logs")) == "logs"
    assert default_target_name(descriptor("aws_s3_bucket.logs[0]")) == "logs-0"
    assert default_target_name(descriptor('aws_s3_bucket.logs["eu"]')) == "logs-eu"


def test_colliding_urns_are_left_unassigned() -> None:
    inventory = [
        descriptor("module.a.aws_s3_bucket.logs"),
        descriptor("module.b.aws_s3_bucket.logs"),
    ]

    draft = draft_group("dev", inventory, project=PROJECT, type_lookup=_lookup)

    assert draft.conflicts == ["module.b.aws_s3_bucket.logs"]
    assert draft.group.entries[1].target_identifier is None


def test_draft_passes_integrity_check(all_paths_exist: Callable[[str], bool]) -> None:
    addresses = [
        "aws_s3_bucket.logs",
        "module.a.aws_s3_bucket.logs",
        "aws_s3_bucket.data[0]",
        "aws_iam_role.app",
    ]
    inventory = FakeInventory({"dev.json": addresses})

    draft = draft_group(
        "dev",
        inventory("dev.json"),
        project=PROJECT,
        type_lookup=_lookup,
        state_location="dev.json",
    )
    result = check_integrity(
        make_ledger(draft.group), read_inventory=inventory, path_exists=all_paths_exist
    )

    assert not result.has_errors

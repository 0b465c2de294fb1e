from __future__ import annotations

import pytest

from statebridge.adapters.terraform import list_managed_resources, parse_state_document
from statebridge.domain.errors import InventoryParseError

STATE = {
    "format_version": "1.0",
    "terraform_version": "1.7.0",
    "values": {
        "root_module": {
            "resources": [
                {
                    "address": "aws_s3_bucket.logs",
                    "mode": "managed",
                    "type": "aws_s3_bucket",
                    "name": "logs",
                    "provider_name": "registry.terraform.io/hashicorp/aws",
                    "values": {"id": "logs-bucket", "arn": "arn:aws:s3:::logs-bucket"},
                },
                {
                    "address": "data.aws_caller_identity.current",
                    "mode": "data",
                    "type": "aws_caller_identity",
                    "name": "current",
                    "provider_name": "registry.terraform.io/hashicorp/aws",
                },
            ],
            "child_modules": [
                {
                    "address": "module.net",
                    "resources": [
                        {
                            "address": "module.net.aws_vpc.main",
                            "mode": "managed",
                            "type": "aws_vpc",
                            "name": "main",
                            "provider_name": "registry.terraform.io/hashicorp/aws",
                        }
                    ],
                    "child_modules": [
                        {
                            "address": "module.net.module.subnets",
                            "resources": [
                                {
                                    "address": "module.net.module.subnets.aws_subnet.a[0]",
                                    "mode": "managed",
                                    "type": "aws_subnet",
                                    "name": "a",
                                    "index": 0,
                                    "provider_name": "registry.terraform.io/hashicorp/aws",
                                }
                            ],
                        }
                    ],
                },
                {
                    "address": "module.dns",
                    "resources": [
                        {
                            "address": "module.dns.aws_route53_zone.primary",
                            "mode": "managed",
                            "type": "aws_route53_zone",
                            "name": "primary",
                            "provider_name": "registry.terraform.io/hashicorp/aws",
                        }
                    ],
                },
            ],
        }
    },
}


def test_resources_listed_root_first_then_depth_first() -> None:
    resources = list_managed_resources(STATE)

    assert [resource.address for resource in resources] == [
        "aws_s3_bucket.logs",
        "module.net.aws_vpc.main",
        "module.net.module.subnets.aws_subnet.a[0]",
        "module.dns.aws_route53_zone.primary",
    ]


def test_descriptor_fields_come_from_state() -> None:
    bucket, vpc, *_ = list_managed_resources(STATE)

    assert bucket.kind == "aws_s3_bucket"
    assert bucket.provider_namespace == "registry.terraform.io/hashicorp/aws"
    assert bucket.attributes["id"] == "logs-bucket"
    assert bucket.module_address is None
    assert vpc.module_address == "module.net"
    assert all(resource.is_managed for resource in list_managed_resources(STATE))


def test_validated_document_is_accepted() -> None:
    document = parse_state_document(STATE)

    assert len(list_managed_resources(document)) == 4


@pytest.mark.parametrize("snapshot", [None, {}, {"values": {}}, {"values": None}])
def test_empty_snapshots_have_no_resources(snapshot: dict[str, object] | None) -> None:
    assert list_managed_resources(snapshot) == ()


def test_malformed_snapshot_raises() -> None:
    with pytest.raises(InventoryParseError):
        list_managed_resources({"values": {"root_module": {"resources": [{"mode": "managed"}]}}})

"""Terraform-to-Pulumi resource type lookup."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final, TypeAlias

from statebridge.domain.errors import NotFoundError, ParseError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

log = getLogger(__name__)

TERRAFORM_TO_PULUMI_PROVIDER: Final[dict[str, str]] = {
    "registry.terraform.io/hashicorp/aws": "aws",
    "registry.terraform.io/hashicorp/azurerm": "azure",
    "registry.terraform.io/hashicorp/azuread": "azuread",
    "registry.terraform.io/hashicorp/google": "gcp",
    "registry.terraform.io/hashicorp/google-beta": "gcp",
    "registry.terraform.io/oracle/oci": "oci",
    "registry.terraform.io/hashicorp/postgresql": "postgresql",
    "registry.terraform.io/hashicorp/mysql": "mysql",
    "registry.terraform.io/hashicorp/datadog": "datadog",
    "registry.terraform.io/grafana/grafana": "grafana",
    "registry.terraform.io/hashicorp/newrelic": "newrelic",
    "registry.terraform.io/integrations/github": "github",
    "registry.terraform.io/hashicorp/gitlab": "gitlab",
    "registry.terraform.io/cloudflare/cloudflare": "cloudflare",
    "registry.terraform.io/hashicorp/vault": "vault",
    "registry.terraform.io/hashicorp/consul": "consul",
    "registry.terraform.io/hashicorp/vsphere": "vsphere",
    "registry.terraform.io/digitalocean/digitalocean": "digitalocean",
    "registry.terraform.io/linode/linode": "linode",
    "registry.terraform.io/hashicorp/nomad": "nomad",
    "registry.terraform.io/hashicorp/random": "random",
}

MappingLoader: TypeAlias = "Callable[[str], Mapping[str, str]]"


class TypeMappingNotFoundError(NotFoundError):
    """No Pulumi type is known for a Terraform provider or resource type."""


def pulumi_provider_for(provider_namespace: str) -> str | None:
    return TERRAFORM_TO_PULUMI_PROVIDER.get(provider_namespace)


@dataclass(frozen=True, slots=True)
class JsonMappingLoader:
    """Load ``<package>.json`` files of the form ``{"resources": {tf_type: token}}``."""

    directory: Path

    def __call__(self, package: str) -> Mapping[str, str]:
        path = self.directory / f"{package}.json"
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise TypeMappingNotFoundError(
                f"no mapping file for {package} in {self.directory}"
            ) from exc
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"failed to parse mapping file {path}: {exc}") from exc
        resources = payload.get("resources") if isinstance(payload, dict) else None
        if not isinstance(resources, dict):
            raise ParseError(f"mapping file {path} has no 'resources' object")
        return {str(key): str(value) for key, value in resources.items()}


@dataclass(slots=True)
class TypeMapper:
    """Memoizing type lookup; one mapping load per Pulumi package per instance."""

    loader: MappingLoader
    _mappings: dict[str, Mapping[str, str]] = field(default_factory=dict, init=False)

    def __call__(self, provider_namespace: str, kind: str) -> str:
        package = pulumi_provider_for(provider_namespace)
        if package is None:
            raise TypeMappingNotFoundError(
                f"no Pulumi provider mapping found for {provider_namespace}"
            )
        token = self._mapping_for(package).get(kind)
        if token is None:
            raise TypeMappingNotFoundError(
                f"no mapping found for resource type {kind} in provider {package}"
            )
        return token

    def _mapping_for(self, package: str) -> Mapping[str, str]:
        cached = self._mappings.get(package)
        if cached is None:
            log.debug("Loading type mapping for %s", package)
            cached = self.loader(package)
            self._mappings[package] = cached
        return cached

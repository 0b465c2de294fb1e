"""Pydantic models describing Pulumi CLI documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PulumiBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PreviewStep(PulumiBaseModel):
    op: str
    urn: str


class PreviewOutput(PulumiBaseModel):
    """Output of ``pulumi preview --json``."""

    steps: list[PreviewStep] = Field(default_factory=list)
    change_summary: dict[str, int] = Field(default_factory=dict, alias="changeSummary")


class ImportResource(BaseModel):
    """One entry of an import file; unknown keys are carried through untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    name: str
    logical_name: str | None = Field(default=None, alias="logicalName")
    id: str | None = None
    component: bool = False


class ImportFile(BaseModel):
    """``pulumi preview --import-file`` output and ``pulumi import --file`` input."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name_table: dict[str, str] | None = Field(default=None, alias="nameTable")
    resources: list[ImportResource] = Field(default_factory=list)

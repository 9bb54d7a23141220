"""
Document domain models for BRD/FRS/SOW pages and the RAID log.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Section(WireModel):
    """One heading/body pair of a structured document."""

    h: str = Field(..., description="Section heading")
    body: str = Field(..., description="Section body (plain text)")


class StructuredDocument(WireModel):
    """Normalized title + ordered sections, shared by BRD, FRS and SOW."""

    title: str = Field(..., min_length=1)
    sections: list[Section] = Field(..., min_length=1)


class RaidEntry(WireModel):
    """Single row of a RAID log."""

    item: str = ""
    owner: str = ""
    status: str = ""
    mitigation: Optional[str] = None


class RaidLog(WireModel):
    """Risks, assumptions, issues and dependencies. All lists always present."""

    title: str
    risks: list[RaidEntry] = Field(default_factory=list)
    assumptions: list[RaidEntry] = Field(default_factory=list)
    issues: list[RaidEntry] = Field(default_factory=list)
    dependencies: list[RaidEntry] = Field(default_factory=list)

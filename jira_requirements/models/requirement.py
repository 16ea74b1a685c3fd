"""Value objects for cascading options, requirements, releases and tags."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from jira_requirements.type_definitions import RequirementKey


class CascadingOption(BaseModel):
    """One value of a cascading select field and its nested values."""

    model_config = ConfigDict(frozen=True)

    value: str
    children: tuple[CascadingOption, ...] = ()


class Requirement(BaseModel):
    """A node of the requirement forest."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    narrative: str = ""
    children: tuple[Requirement, ...] = ()

    @classmethod
    def named(
        cls,
        name: str,
        requirement_type: str,
        children: tuple[Requirement, ...] = (),
    ) -> Requirement:
        """Create a requirement whose narrative is its own name."""
        return cls(name=name, type=requirement_type, narrative=name, children=children)

    @property
    def key(self) -> RequirementKey:
        return (self.type, self.name)

    def as_tag(self) -> TestTag:
        return TestTag(name=self.name, type=self.type)


class TestTag(BaseModel):
    """Flat (name, type) label attached to a test outcome."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    name: str
    type: str

    @property
    def key(self) -> RequirementKey:
        return (self.type, self.name)


class Release(BaseModel):
    """A release or iteration read from the release custom field."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    children: tuple[Release, ...] = ()
    parents: tuple[str, ...] = Field(
        default=(), description="Names of the ancestor releases, root first",
    )

"""Type definitions shared across the requirements provider."""

from typing import Any, TypedDict

type JiraData = dict[str, Any]

# (type, name) pair identifying a requirement in the forest
type RequirementKey = tuple[str, str]

type ConfigValue = str | int | bool | list[str] | None


class JiraConfig(TypedDict):
    """Configuration for the Jira client."""

    url: str
    username: str
    api_token: str
    project: str
    verify_ssl: bool

class RequirementsConfig(TypedDict):
    """Custom field settings used by the requirements provider."""

    custom_field: str
    issue_type: str
    requirement_types: list[str]
    use_customfield_releases: bool
    releases_custom_field: str
    release_types: list[str]

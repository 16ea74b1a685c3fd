"""Settings schema for the JIRA custom-field requirements provider.

Defines the Pydantic settings model with validation and environment variable
handling. Every value can be supplied through a ``JREQ_``-prefixed
environment variable (for example ``JREQ_REQUIREMENTS_CUSTOM_FIELD``).
"""

from typing import Annotated
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from jira_requirements.type_definitions import JiraConfig, RequirementsConfig

DEFAULT_CUSTOM_FIELD = "Requirements"
DEFAULT_ISSUETYPE = "Bug"
DEFAULT_REQUIREMENT_TYPES = "capability, feature"
DEFAULT_RELEASE_FIELD = "Release"
DEFAULT_RELEASE_TYPES = "Release, Iteration"


def split_type_names(value: str) -> list[str]:
    """Split a comma-separated list of type names, trimming blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Provider settings, immutable once loaded."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",
        env_prefix="JREQ_",
        frozen=True,
    )

    # ========================================================================
    # JIRA CONNECTION (JREQ_JIRA_*)
    # ========================================================================

    jira_url: str = Field(
        default="https://your-company.atlassian.net", description="Jira instance URL",
    )
    jira_username: str = Field(default="", description="Jira username/email")
    jira_api_token: str = Field(default="", description="Jira API token or password")
    jira_project: str = Field(default="DEMO", description="Jira project key")
    jira_verify_ssl: bool = Field(
        default=True, description="Enable SSL certificate verification",
    )

    # ========================================================================
    # REQUIREMENTS CUSTOM FIELD
    # ========================================================================

    requirements_custom_field: str = Field(
        default=DEFAULT_CUSTOM_FIELD,
        description="Cascading select field holding the requirements",
    )
    requirements_issue_type: str = Field(
        default=DEFAULT_ISSUETYPE,
        description="Issue type whose create metadata carries the field options",
    )
    requirement_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: split_type_names(DEFAULT_REQUIREMENT_TYPES),
        description="Requirement type name for each cascading level",
    )

    # ========================================================================
    # RELEASES CUSTOM FIELD
    # ========================================================================

    use_customfield_releases: bool = Field(
        default=False,
        description="Read versions from the release custom field instead of fixVersions",
    )
    releases_custom_field: str = Field(
        default=DEFAULT_RELEASE_FIELD,
        description="Cascading select field holding the releases",
    )
    release_types: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: split_type_names(DEFAULT_RELEASE_TYPES),
        description="Release label for each cascading level",
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str | None = Field(default=None, description="Optional log file path")

    @field_validator("jira_url")
    @classmethod
    def validate_jira_url(cls, v: str) -> str:
        """Validate Jira URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Jira URL must start with http:// or https://")
        if not urlparse(v).netloc:
            raise ValueError("Jira URL must have a valid hostname")
        return v.rstrip("/")

    @field_validator("requirement_types", "release_types", mode="before")
    @classmethod
    def split_types(cls, v: object) -> object:
        """Accept comma-separated strings as well as lists."""
        if isinstance(v, str):
            return split_type_names(v)
        if isinstance(v, list | tuple):
            return [str(item).strip() for item in v if str(item).strip()]
        return v

    @field_validator("requirement_types", "release_types")
    @classmethod
    def validate_types_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one type name must be configured")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "NOTICE", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {", ".join(valid_levels)}')
        return v.upper()

    # ========================================================================
    # UTILITY METHODS
    # ========================================================================

    def get_jira_config(self) -> JiraConfig:
        """Get Jira configuration as dictionary."""
        return {
            "url": self.jira_url,
            "username": self.jira_username,
            "api_token": self.jira_api_token,
            "project": self.jira_project,
            "verify_ssl": self.jira_verify_ssl,
        }

    def get_requirements_config(self) -> RequirementsConfig:
        """Get custom field configuration as dictionary."""
        return {
            "custom_field": self.requirements_custom_field,
            "issue_type": self.requirements_issue_type,
            "requirement_types": list(self.requirement_types),
            "use_customfield_releases": self.use_customfield_releases,
            "releases_custom_field": self.releases_custom_field,
            "release_types": list(self.release_types),
        }

    def custom_fields(self) -> list[str]:
        """Names of the custom fields the client must decode on issues."""
        fields = [self.requirements_custom_field]
        if self.use_customfield_releases:
            fields.append(self.releases_custom_field)
        return fields

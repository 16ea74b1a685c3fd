"""Requirement and release providers."""

from jira_requirements.providers.base_provider import (
    ReleaseProvider,
    RequirementsProviderError,
    RequirementsTagProvider,
)
from jira_requirements.providers.custom_fields_provider import (
    JiraCustomFieldsRequirementsProvider,
)

__all__ = [
    "JiraCustomFieldsRequirementsProvider",
    "ReleaseProvider",
    "RequirementsProviderError",
    "RequirementsTagProvider",
]

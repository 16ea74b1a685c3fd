"""Interfaces the reporting system uses to query requirements and releases."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from jira_requirements.models import Release, Requirement, TestTag


class RequirementsProviderError(Exception):
    """Unrecoverable configuration or connectivity error raised by a provider."""


class RequirementsTagProvider(ABC):
    """Supplies the requirement forest and the tags of a test outcome.

    A test outcome is represented by the issue keys it is linked to.
    """

    @abstractmethod
    def get_requirements(self) -> list[Requirement]:
        """Return the requirement forest."""

    @abstractmethod
    def get_parent_requirement_of(self, issue_keys: Sequence[str]) -> Requirement | None:
        """Return the most specific requirement the outcome belongs to."""

    @abstractmethod
    def get_requirement_for(self, tag: TestTag) -> Requirement | None:
        """Return the requirement with the tag's type and name."""

    @abstractmethod
    def get_tags_for(self, issue_keys: Sequence[str]) -> frozenset[TestTag]:
        """Return every tag associated with the outcome."""


class ReleaseProvider(ABC):
    """Supplies the releases a test outcome can be reported against."""

    @abstractmethod
    def get_releases(self) -> list[Release]:
        """Return the release forest."""

    @abstractmethod
    def is_active(self) -> bool:
        """Whether this provider should be used for releases."""

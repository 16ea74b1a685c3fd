"""Requirements and releases read from JIRA cascading select custom fields.

A cascading select field (``Requirements`` by default) defines the levels of
requirements; each level is given a type name from the configured requirement
types (``capability, feature`` by default). The field options are read from
the create metadata of one issue type (``Bug`` by default).

Releases can also come from a cascading select (``Release`` by default) as an
alternative to the built-in fix versions. This mode is off unless
``use_customfield_releases`` is set.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING

from jira_requirements.clients.exceptions import JiraError, JiraResourceNotFoundError
from jira_requirements.config import get_settings, logger
from jira_requirements.models import IssueRecord, Release, Requirement, TestTag
from jira_requirements.providers.base_provider import (
    ReleaseProvider,
    RequirementsProviderError,
    RequirementsTagProvider,
)
from jira_requirements.providers.hierarchy import (
    AncestorIndex,
    build_requirements,
    flatten_requirements,
    index_ancestors,
    requirements_called,
)
from jira_requirements.providers.release_converter import ReleaseConverter

if TYPE_CHECKING:
    from jira_requirements.clients.jira_client import JiraClient
    from jira_requirements.settings import Settings

FIX_VERSION_TAG_TYPE = "Version"
RELEASE_FIELD_TAG_TYPE = "version"


class JiraCustomFieldsRequirementsProvider(RequirementsTagProvider, ReleaseProvider):
    """Requirement forest, tags and releases backed by JIRA custom fields.

    The requirement forest, its ancestor index and the release forest are each
    read once and cached for the lifetime of the instance. Create a new
    provider to pick up changes made in JIRA.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        jira_client: JiraClient | None = None,
    ) -> None:
        settings = settings or get_settings()
        field_config = settings.get_requirements_config()

        self.requirements_field = field_config["custom_field"]
        self.release_field = field_config["releases_custom_field"]
        self.requirement_types = field_config["requirement_types"]
        self.release_provider_active = field_config["use_customfield_releases"]
        self.release_converter = ReleaseConverter(field_config["release_types"])

        if jira_client is None:
            from jira_requirements.clients.jira_client import JiraClient  # noqa: PLC0415

            jira_client = JiraClient(
                settings.get_jira_config(),
                metadata_issue_type=field_config["issue_type"],
                custom_fields=settings.custom_fields(),
            )
        self.jira_client = jira_client

        self._requirements: list[Requirement] | None = None
        self._requirement_ancestors: AncestorIndex | None = None
        self._releases: list[Release] | None = None
        self._cache_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Requirement forest
    # ------------------------------------------------------------------

    def get_requirements(self) -> list[Requirement]:
        if self._requirements is None:
            with self._cache_lock:
                if self._requirements is None:
                    try:
                        options = self.jira_client.find_options_for_cascading_select(
                            self.requirements_field,
                        )
                    except JiraError as e:
                        logger.warning("No root requirements found in field %s: %s", self.requirements_field, e)
                        options = []
                    self._requirements = build_requirements(options, self.requirement_types)
                    logger.debug(
                        "Loaded %d root requirements from field %s",
                        len(self._requirements),
                        self.requirements_field,
                    )
        return self._requirements

    def get_requirement_ancestors(self) -> AncestorIndex:
        """Ancestor chain of every requirement in the forest, keyed by (type, name)."""
        if self._requirement_ancestors is None:
            with self._cache_lock:
                if self._requirement_ancestors is None:
                    self._requirement_ancestors = index_ancestors(self.get_requirements())
        return self._requirement_ancestors

    def ancestors_of(self, requirement: Requirement) -> tuple[Requirement, ...]:
        """Ancestors of the forest requirement with the same (type, name), root first."""
        return self.get_requirement_ancestors().get(requirement.key, ())

    def get_requirement_for(self, tag: TestTag) -> Requirement | None:
        for requirement in flatten_requirements(self.get_requirements()):
            if requirement.key == tag.key:
                return requirement
        return None

    # ------------------------------------------------------------------
    # Issue resolution
    # ------------------------------------------------------------------

    def get_parent_requirement_of(self, issue_keys: Sequence[str]) -> Requirement | None:
        if not issue_keys:
            return None
        return self._parent_requirement_by_issue_key(issue_keys[0])

    def _parent_requirement_by_issue_key(self, issue_key: str) -> Requirement | None:
        try:
            issue = self.jira_client.find_by_key(issue_key)
        except JiraResourceNotFoundError:
            logger.warning("Issue %s not found", issue_key)
            return None
        except JiraError as e:
            msg = f"Could not resolve the requirement of issue {issue_key}: {e}"
            raise RequirementsProviderError(msg) from e

        if issue is None:
            return None
        field_values = issue.custom_field_value(self.requirements_field)
        if not field_values:
            logger.warning("Issue %s has no value for field %s", issue_key, self.requirements_field)
            return None

        requirements = requirements_called(field_values, self.requirement_types)
        return requirements[-1]

    def get_associated_requirements(self, issue_keys: Sequence[str]) -> list[Requirement]:
        """The parent requirement of the outcome followed by its ancestors."""
        parent = self.get_parent_requirement_of(issue_keys)
        if parent is None:
            return []
        return [parent, *self.ancestors_of(parent)]

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def get_tags_for(self, issue_keys: Sequence[str]) -> frozenset[TestTag]:
        tags: set[TestTag] = set()
        for issue_key in issue_keys:
            tags.update(self._tags_from_issue(issue_key))
        return frozenset(tags)

    def _tags_from_issue(self, issue_key: str) -> list[TestTag]:
        tags = self._requirement_tags(issue_key)

        issue: IssueRecord | None = None
        try:
            issue = self.jira_client.find_by_key(issue_key)
        except JiraResourceNotFoundError:
            logger.warning("Issue %s not found", issue_key)
        except JiraError:
            logger.exception("Could not load issue: %s", issue_key)

        if issue is not None:
            tags.append(TestTag(name=issue.summary, type=issue.issue_type))
            if self.release_provider_active:
                tags.extend(self._custom_version_tags(issue))
            else:
                tags.extend(self._fix_version_tags(issue))
        return tags

    def _requirement_tags(self, issue_key: str) -> list[TestTag]:
        parent = self._parent_requirement_by_issue_key(issue_key)
        if parent is None:
            return []
        return [requirement.as_tag() for requirement in (parent, *self.ancestors_of(parent))]

    @staticmethod
    def _fix_version_tags(issue: IssueRecord) -> list[TestTag]:
        return [TestTag(name=version, type=FIX_VERSION_TAG_TYPE) for version in issue.fix_versions]

    def _custom_version_tags(self, issue: IssueRecord) -> list[TestTag]:
        versions = issue.custom_field_value(self.release_field) or ()
        return [TestTag(name=version, type=RELEASE_FIELD_TAG_TYPE) for version in versions]

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def get_releases(self) -> list[Release]:
        if self._releases is None:
            with self._cache_lock:
                if self._releases is None:
                    logger.info("Loading releases from JIRA custom field %s", self.release_field)
                    try:
                        options = self.jira_client.find_options_for_cascading_select(self.release_field)
                    except JiraError as e:
                        logger.warning("No releases found in field %s: %s", self.release_field, e)
                        options = []
                    self._releases = self.release_converter.convert_to_releases(options)
                    logger.debug("Releases: %s", [release.name for release in self._releases])
        return self._releases

    def is_active(self) -> bool:
        return self.release_provider_active

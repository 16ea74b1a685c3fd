"""Shared pytest fixtures and configuration for all tests."""

import os
from collections.abc import Generator, Mapping, Sequence

import pytest
from _pytest.config import Config

from jira_requirements.clients.exceptions import (
    JiraApiError,
    JiraFieldMetadataError,
    JiraResourceNotFoundError,
)
from jira_requirements.config import reset_settings
from jira_requirements.models import CascadingOption, IssueRecord
from jira_requirements.settings import Settings


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line(
        "markers",
        "integration: mark a test as an integration test against a live Jira",
    )


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean environment flag (true/false)."""
    val = os.environ.get(name, "true" if default else "false").strip().lower()
    return val in {"1", "true", "yes", "on"}


def pytest_collection_modifyitems(config: Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless JREQ_RUN_INTEGRATION is true.

    Unmarked tests are skipped unless JREQ_RUN_ALL_TESTS is true.
    """
    run_all = _env_flag("JREQ_RUN_ALL_TESTS", False)
    run_integration = _env_flag("JREQ_RUN_INTEGRATION", False) or run_all

    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled by default. Set JREQ_RUN_INTEGRATION=true to enable.",
    )
    skip_unmarked = pytest.mark.skip(
        reason="Unmarked test skipped by default. Mark with unit/integration or set JREQ_RUN_ALL_TESTS=true.",
    )

    for item in items:
        kws = item.keywords
        if "integration" in kws and not run_integration:
            item.add_marker(skip_integration)
            continue
        if not run_all and not any(m in kws for m in ("unit", "integration")):
            item.add_marker(skip_unmarked)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Hide JREQ_* variables of the developer's shell and reset cached settings."""
    if not _env_flag("JREQ_RUN_INTEGRATION", False):
        for name in list(os.environ):
            if name.startswith("JREQ_") and not name.startswith("JREQ_RUN_"):
                monkeypatch.delenv(name)
    reset_settings()
    yield
    reset_settings()


# ----------------------------------------------------------------------
# Demo project data
# ----------------------------------------------------------------------

REQUIREMENT_OPTIONS = [
    CascadingOption(
        value="Grow Apples",
        children=(
            CascadingOption(value="Grow red apples"),
            CascadingOption(value="Grow green apples"),
        ),
    ),
    CascadingOption(
        value="Grow Potatoes",
        children=(
            CascadingOption(value="Grow normal potatoes"),
            CascadingOption(value="Grow organic potatoes"),
        ),
    ),
    CascadingOption(value="Raise Chickens"),
    CascadingOption(value="Raise Sheep"),
]

RELEASE_OPTIONS = [
    CascadingOption(
        value="Release 1",
        children=(CascadingOption(value="Iteration 1.1"), CascadingOption(value="Iteration 1.2")),
    ),
    CascadingOption(value="Release 2", children=(CascadingOption(value="Iteration 2.1"),)),
]

DEMO_ISSUES = {
    "DEMO-8": IssueRecord(
        key="DEMO-8",
        summary="Plant potatoes",
        issue_type="Story",
        fix_versions=("Sprint 3",),
        custom_fields={
            "Requirements": ("Grow Potatoes", "Grow normal potatoes"),
            "Release": ("Release 1", "Iteration 1.1"),
        },
    ),
    "DEMO-2": IssueRecord(
        key="DEMO-2",
        summary="Pick apples",
        issue_type="Bug",
        custom_fields={"Requirements": ("Grow Apples",)},
    ),
    "DEMO-9": IssueRecord(
        key="DEMO-9",
        summary="Feed the dog",
        issue_type="Task",
        fix_versions=("Sprint 1", "Sprint 2"),
    ),
    "DEMO-11": IssueRecord(
        key="DEMO-11",
        summary="Milk goats",
        issue_type="Story",
        custom_fields={"Requirements": ("Raise Goats", "Milk goats daily")},
    ),
}


class FakeJiraClient:
    """In-memory stand-in for JiraClient that records every lookup."""

    def __init__(
        self,
        options: Mapping[str, Sequence[CascadingOption]] | None = None,
        issues: Mapping[str, IssueRecord] | None = None,
        not_found_keys: Sequence[str] = (),
        failing_keys: Sequence[str] = (),
    ) -> None:
        self.options = dict(options or {})
        self.issues = dict(issues or {})
        self.not_found_keys = set(not_found_keys)
        self.failing_keys = set(failing_keys)
        self.option_lookups: list[str] = []
        self.issue_lookups: list[str] = []

    def find_options_for_cascading_select(self, field_name: str) -> list[CascadingOption]:
        self.option_lookups.append(field_name)
        if field_name not in self.options:
            msg = f"Field {field_name} not found"
            raise JiraFieldMetadataError(msg)
        return list(self.options[field_name])

    def find_by_key(self, issue_key: str) -> IssueRecord | None:
        self.issue_lookups.append(issue_key)
        if issue_key in self.not_found_keys:
            msg = f"Issue {issue_key} not found"
            raise JiraResourceNotFoundError(msg)
        if issue_key in self.failing_keys:
            msg = "HTTP Error 500: Internal Server Error"
            raise JiraApiError(msg)
        return self.issues.get(issue_key)


@pytest.fixture
def make_jira_client() -> type[FakeJiraClient]:
    """The fake client class, for tests that need their own field data."""
    return FakeJiraClient


@pytest.fixture
def demo_jira_client() -> FakeJiraClient:
    """Fake client serving the demo requirement and release fields."""
    return FakeJiraClient(
        options={"Requirements": REQUIREMENT_OPTIONS, "Release": RELEASE_OPTIONS},
        issues=DEMO_ISSUES,
        not_found_keys=["DEMO-404"],
        failing_keys=["DEMO-500"],
    )


@pytest.fixture
def demo_settings() -> Settings:
    """Settings for the DEMO project with the default custom fields."""
    return Settings(
        jira_url="https://jira.example.com",
        jira_project="DEMO",
        requirement_types="capability,feature",
    )


@pytest.fixture
def release_settings() -> Settings:
    """Demo settings with custom field releases switched on."""
    return Settings(
        jira_url="https://jira.example.com",
        jira_project="DEMO",
        requirement_types="capability,feature",
        use_customfield_releases=True,
    )

"""Models package for data structures used in the application."""

from jira_requirements.models.issue import IssueRecord
from jira_requirements.models.requirement import (
    CascadingOption,
    Release,
    Requirement,
    TestTag,
)

__all__ = ["CascadingOption", "IssueRecord", "Release", "Requirement", "TestTag"]

"""Requirements and tags for test reports, read from JIRA custom fields."""

__version__ = "0.1.0"

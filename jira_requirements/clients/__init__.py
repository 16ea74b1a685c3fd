"""API clients package for the requirements provider.

Lazily expose the client class so importing the exceptions does not pull in
the `jira` library.
"""

__all__ = ["JiraClient"]


def __getattr__(name: str) -> object:  # pragma: no cover - simple lazy import shim
    if name == "JiraClient":
        from .jira_client import JiraClient as _JiraClient  # noqa: PLC0415

        return _JiraClient
    raise AttributeError(name)

"""Jira API client for the requirements provider.

Provides a clean, exception-based interface for the two lookups the provider
needs: the options of a cascading select custom field and single issues by key.
"""

from collections.abc import Iterable
from typing import Any, NoReturn

from jira import JIRA, JIRAError
from requests import Response

from jira_requirements.clients.exceptions import (
    JiraApiError,
    JiraAuthenticationError,
    JiraConnectionError,
    JiraFieldMetadataError,
    JiraResourceNotFoundError,
)
from jira_requirements.config import logger
from jira_requirements.models import CascadingOption, IssueRecord
from jira_requirements.settings import DEFAULT_ISSUETYPE
from jira_requirements.type_definitions import JiraConfig, JiraData

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_BAD_REQUEST_MIN = 400
HTTP_NOT_FOUND = 404

CREATEMETA_PATH = "/rest/api/2/issue/createmeta"


def decode_custom_field_value(raw: Any) -> tuple[str, ...]:
    """Decode a custom field value into its selected values, outermost first.

    Cascading selects are stored as ``{"value": "A", "child": {"value": "B"}}``
    and come back as ``("A", "B")``. Multi-value fields are concatenated.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if isinstance(raw, list):
        values: list[str] = []
        for item in raw:
            values.extend(decode_custom_field_value(item))
        return tuple(values)
    if isinstance(raw, dict):
        values = []
        node: Any = raw
        while isinstance(node, dict):
            value = node.get("value", node.get("name"))
            if value:
                values.append(str(value))
            node = node.get("child")
        return tuple(values)
    return (str(raw),)


def parse_cascading_options(allowed_values: Any, field_name: str) -> list[CascadingOption]:
    """Convert a field's ``allowedValues`` metadata into cascading options.

    Raises:
        JiraFieldMetadataError: If the metadata is not a list of option objects

    """
    if not isinstance(allowed_values, list):
        msg = f"Field {field_name} has no option list in its metadata"
        raise JiraFieldMetadataError(msg)

    options: list[CascadingOption] = []
    for entry in allowed_values:
        if not isinstance(entry, dict) or "value" not in entry:
            msg = f"Malformed option in metadata of field {field_name}: {entry!r}"
            raise JiraFieldMetadataError(msg)
        children = parse_cascading_options(entry.get("children") or [], field_name)
        options.append(CascadingOption(value=str(entry["value"]), children=tuple(children)))
    return options


class JiraClient:
    """Jira client for the custom field lookups of the requirements provider.

    Methods raise exceptions from :mod:`jira_requirements.clients.exceptions`
    instead of returning empty results on failure; the only absence that is
    not an error is an issue that does not exist.
    """

    def __init__(
        self,
        jira_config: JiraConfig,
        metadata_issue_type: str = DEFAULT_ISSUETYPE,
        custom_fields: Iterable[str] = (),
    ) -> None:
        """Initialize and connect the Jira client.

        Args:
            jira_config: Connection settings (url, username, api_token, project)
            metadata_issue_type: Issue type whose create metadata lists field options
            custom_fields: Names of custom fields to decode on fetched issues

        """
        self.jira_url: str = jira_config.get("url", "").rstrip("/")
        self.jira_username: str = jira_config.get("username", "")
        self.jira_token: str = jira_config.get("api_token", "")
        self.project: str = jira_config.get("project", "")
        self.verify_ssl: bool = jira_config.get("verify_ssl", True)

        if not self.jira_url:
            msg = "Jira URL is required"
            raise ValueError(msg)
        if not self.project:
            msg = "Jira project key is required"
            raise ValueError(msg)

        self.metadata_issue_type = metadata_issue_type
        self.custom_field_names: list[str] = list(custom_fields)

        self.jira: JIRA | None = None
        self._field_ids: dict[str, str] | None = None

        logger.debug("JIRA URL: %s", self.jira_url)
        logger.debug("JIRA project: %s", self.project)
        logger.debug("JIRA user: %s", self.jira_username)

        self._connect()

    def _connect(self) -> None:
        """Connect to the Jira API.

        Tries token authentication first, then basic authentication, then an
        anonymous connection when no credentials are configured.

        Raises:
            JiraAuthenticationError: If every authentication method fails

        """
        attempts: list[tuple[str, dict[str, Any]]] = []
        options = {"verify": self.verify_ssl}
        if self.jira_token:
            attempts.append(("token", {"token_auth": self.jira_token, "options": options}))
        if self.jira_token and self.jira_username:
            attempts.append(
                ("basic", {"basic_auth": (self.jira_username, self.jira_token), "options": options}),
            )
        if not self.jira_token:
            attempts.append(("anonymous", {"options": options}))

        connection_errors = []
        for label, kwargs in attempts:
            try:
                logger.info("Connecting to Jira using %s authentication", label)
                self.jira = JIRA(server=self.jira_url, **kwargs)
                server_info = self.jira.server_info()
                logger.success(
                    "Connected to Jira server: %s (%s)",
                    server_info.get("baseUrl"),
                    server_info.get("version"),
                )
                return
            except Exception as e:  # noqa: BLE001
                error_msg = f"{label.capitalize()} authentication failed: {e!s}"
                logger.warning(error_msg)
                connection_errors.append(error_msg)

        logger.error("All authentication methods failed for Jira connection to %s", self.jira_url)
        msg = f"Failed to authenticate with Jira: {'; '.join(connection_errors)}"
        raise JiraAuthenticationError(msg)

    def _make_request(self, path: str, **kwargs: object) -> Response:
        """Make a GET request against the REST API with error mapping.

        Raises:
            JiraConnectionError: If the client is not connected or the request fails
            JiraResourceNotFoundError: On HTTP 404
            JiraAuthenticationError: On HTTP 401/403
            JiraApiError: On any other error response

        """
        if not self.jira:
            msg = "Jira client is not initialized"
            raise JiraConnectionError(msg)

        url = f"{self.jira_url}{path}"
        headers = {"Accept": "application/json"}
        try:
            response = self.jira._session.get(url, headers=headers, **kwargs)  # noqa: SLF001
        except JIRAError as e:
            self._raise_for_status(e.status_code, str(e))
        except Exception as e:
            msg = f"Error during API request to {url}: {e!s}"
            raise JiraConnectionError(msg) from e

        if response.status_code >= HTTP_BAD_REQUEST_MIN:
            self._raise_for_status(response.status_code, f"HTTP Error {response.status_code}: {response.reason}")
        return response

    @staticmethod
    def _raise_for_status(status_code: int | None, error_msg: str) -> NoReturn:
        if status_code == HTTP_NOT_FOUND:
            raise JiraResourceNotFoundError(error_msg) from None
        if status_code in {401, 403}:
            raise JiraAuthenticationError(error_msg) from None
        raise JiraApiError(error_msg) from None

    def _get_createmeta_fields(self) -> list[JiraData]:
        """Get the field definitions of the metadata issue type.

        Uses the expanded ``issue/createmeta`` endpoint and falls back to the
        paged ``createmeta/{project}/issuetypes`` endpoints of Jira 9+.
        """
        params = {
            "projectKeys": self.project,
            "issuetypeNames": self.metadata_issue_type,
            "expand": "projects.issuetypes.fields",
        }
        try:
            meta_data = self._make_request(CREATEMETA_PATH, params=params).json() or {}
        except JiraResourceNotFoundError:
            logger.debug("Expanded createmeta unavailable, using paged createmeta endpoints")
            return self._get_paged_createmeta_fields()

        projects = meta_data.get("projects") or []
        if not projects:
            msg = f"No create metadata for project {self.project}"
            raise JiraFieldMetadataError(msg)
        issue_types = (projects[0] or {}).get("issuetypes") or []
        if not issue_types:
            msg = f"No create metadata for issue type {self.metadata_issue_type} in {self.project}"
            raise JiraFieldMetadataError(msg)
        fields_map = (issue_types[0] or {}).get("fields") or {}
        if not isinstance(fields_map, dict):
            msg = "Malformed create metadata: fields is not an object"
            raise JiraFieldMetadataError(msg)
        return [{"fieldId": field_id, **definition} for field_id, definition in fields_map.items()]

    def _get_paged_createmeta_fields(self) -> list[JiraData]:
        issue_types = self._make_request(f"{CREATEMETA_PATH}/{self.project}/issuetypes").json() or {}
        issue_type_id = None
        for issue_type in issue_types.get("values") or []:
            if issue_type.get("name") == self.metadata_issue_type:
                issue_type_id = issue_type.get("id")
                break
        if issue_type_id is None:
            msg = f"No create metadata for issue type {self.metadata_issue_type} in {self.project}"
            raise JiraFieldMetadataError(msg)

        fields = self._make_request(
            f"{CREATEMETA_PATH}/{self.project}/issuetypes/{issue_type_id}",
        ).json() or {}
        return list(fields.get("values") or [])

    def find_options_for_cascading_select(self, field_name: str) -> list[CascadingOption]:
        """Get the option tree of a cascading select custom field.

        Args:
            field_name: Display name (or id) of the custom field

        Returns:
            The top-level options with their nested options

        Raises:
            JiraFieldMetadataError: If the field is absent or its metadata is malformed
            JiraApiError: If the API request fails

        """
        try:
            fields = self._get_createmeta_fields()
        except ValueError as e:
            msg = f"Create metadata for field {field_name} is not valid JSON: {e!s}"
            raise JiraFieldMetadataError(msg) from e

        for definition in fields:
            if field_name in (definition.get("name"), definition.get("fieldId")):
                options = parse_cascading_options(definition.get("allowedValues"), field_name)
                logger.debug("Read %d top-level options for field %s", len(options), field_name)
                return options

        msg = f"Field {field_name} not found for issue type {self.metadata_issue_type} in {self.project}"
        raise JiraFieldMetadataError(msg)

    def _custom_field_ids(self) -> dict[str, str]:
        """Map configured custom field names to their ``customfield_*`` ids."""
        if self._field_ids is None:
            if not self.jira:
                msg = "Jira client is not initialized"
                raise JiraConnectionError(msg)
            try:
                all_fields = self.jira.fields()
            except JIRAError as e:
                msg = f"Failed to retrieve custom fields: {e}"
                raise JiraApiError(msg) from e

            by_name = {field.get("name"): field.get("id") for field in all_fields}
            field_ids = {}
            for name in self.custom_field_names:
                if name in by_name:
                    field_ids[name] = by_name[name]
                else:
                    logger.warning("Custom field %s does not exist in Jira", name)
            self._field_ids = field_ids
        return self._field_ids

    def find_by_key(self, issue_key: str) -> IssueRecord | None:
        """Get an issue by key.

        Args:
            issue_key: The issue key, e.g. ``DEMO-8``

        Returns:
            The issue record, or None if no such issue exists

        Raises:
            JiraApiError: If the lookup fails for any other reason

        """
        if not self.jira:
            msg = "Jira client is not initialized"
            raise JiraConnectionError(msg)

        field_ids = self._custom_field_ids()
        fields = ",".join(["summary", "issuetype", "fixVersions", *field_ids.values()])
        try:
            issue = self.jira.issue(issue_key, fields=fields)
        except JIRAError as e:
            if e.status_code in {HTTP_BAD_REQUEST, HTTP_NOT_FOUND} or "issue does not exist" in str(e).lower():
                logger.warning("Issue %s not found", issue_key)
                return None
            msg = f"Failed to get issue {issue_key}: {e!s}"
            raise JiraApiError(msg) from e

        raw_fields: JiraData = (issue.raw or {}).get("fields") or {}
        return IssueRecord(
            key=issue_key,
            summary=raw_fields.get("summary") or "",
            issue_type=(raw_fields.get("issuetype") or {}).get("name", ""),
            fix_versions=tuple(
                version["name"] for version in raw_fields.get("fixVersions") or [] if version.get("name")
            ),
            custom_fields={
                name: decode_custom_field_value(raw_fields.get(field_id))
                for name, field_id in field_ids.items()
            },
        )

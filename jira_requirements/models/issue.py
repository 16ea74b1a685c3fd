"""Issue record returned by the Jira client."""

from pydantic import BaseModel, ConfigDict, Field


class IssueRecord(BaseModel):
    """The parts of a Jira issue the requirements provider reads."""

    model_config = ConfigDict(frozen=True)

    key: str
    summary: str = ""
    issue_type: str = ""
    fix_versions: tuple[str, ...] = ()
    custom_fields: dict[str, tuple[str, ...]] = Field(default_factory=dict)

    def custom_field_value(self, field_name: str) -> tuple[str, ...] | None:
        """Return the selected values of a custom field, or None when unset."""
        values = self.custom_fields.get(field_name)
        if not values:
            return None
        return values

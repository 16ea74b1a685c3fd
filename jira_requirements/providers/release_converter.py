"""Convert the release custom field's options into a release forest."""

from collections.abc import Iterable, Sequence

from jira_requirements.models import CascadingOption, Release
from jira_requirements.providers.hierarchy import requirement_type_for_depth


class ReleaseConverter:
    """Builds releases from cascading options, labelling each level.

    Labels follow the same depth rule as requirement types: the last
    configured label is reused for every deeper level.
    """

    def __init__(self, release_types: Sequence[str]) -> None:
        if not release_types:
            msg = "At least one release type is required"
            raise ValueError(msg)
        self.release_types = list(release_types)

    def convert_to_releases(self, options: Iterable[CascadingOption]) -> list[Release]:
        return self._convert(options, parents=(), depth=0)

    def _convert(
        self,
        options: Iterable[CascadingOption],
        parents: tuple[str, ...],
        depth: int,
    ) -> list[Release]:
        releases = []
        for option in options:
            children = self._convert(option.children, (*parents, option.value), depth + 1)
            releases.append(
                Release(
                    name=option.value,
                    label=requirement_type_for_depth(depth, self.release_types),
                    children=tuple(children),
                    parents=parents,
                ),
            )
        return releases

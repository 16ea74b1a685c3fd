"""Requirement forest construction and traversal.

Pure functions over the requirement forest: typing nodes by depth, building
the forest from cascading options, indexing ancestor chains and flattening.
"""

from collections.abc import Iterable, Sequence

from jira_requirements.models import CascadingOption, Requirement
from jira_requirements.type_definitions import RequirementKey

type AncestorIndex = dict[RequirementKey, tuple[Requirement, ...]]


def requirement_type_for_depth(depth: int, requirement_types: Sequence[str]) -> str:
    """Type name for a node at ``depth``; deeper levels reuse the last type."""
    return requirement_types[min(depth, len(requirement_types) - 1)]


def build_requirements(
    options: Iterable[CascadingOption],
    requirement_types: Sequence[str],
    depth: int = 0,
) -> list[Requirement]:
    """Convert cascading options into a typed requirement forest.

    Args:
        options: Options at one level of the cascading select
        requirement_types: Configured type name per level
        depth: Level of ``options`` in the source tree

    Returns:
        One requirement per option, in option order, with its children built
        from the nested options one level deeper

    """
    return [
        Requirement.named(
            option.value,
            requirement_type_for_depth(depth, requirement_types),
            children=tuple(build_requirements(option.children, requirement_types, depth + 1)),
        )
        for option in options
    ]


def requirements_called(
    field_values: Sequence[str], requirement_types: Sequence[str],
) -> list[Requirement]:
    """Build the requirement chain named by an issue's field value, outermost first.

    The chain is synthesized from the names alone and is not looked up in
    the forest read from the field metadata.
    """
    return [
        Requirement.named(value, requirement_type_for_depth(level, requirement_types))
        for level, value in enumerate(field_values)
    ]


def index_ancestors(requirements: Iterable[Requirement]) -> AncestorIndex:
    """Map every requirement in the forest to its ancestors, root first.

    Top-level requirements map to an empty chain. A requirement never appears
    in its own chain, and the last element of a chain is the direct parent.
    """
    index: AncestorIndex = {}
    for requirement in requirements:
        index[requirement.key] = ()
        _index_children((requirement,), requirement.children, index)
    return index


def _index_children(
    parents: tuple[Requirement, ...],
    children: Iterable[Requirement],
    index: AncestorIndex,
) -> None:
    for child in children:
        index[child.key] = parents
        _index_children((*parents, child), child.children, index)


def flatten_requirements(requirements: Iterable[Requirement]) -> list[Requirement]:
    """Flatten the forest depth-first, each node before its children."""
    flattened: list[Requirement] = []
    for requirement in requirements:
        flattened.append(requirement)
        flattened.extend(flatten_requirements(requirement.children))
    return flattened

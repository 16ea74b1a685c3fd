"""Command line entry point for the JIRA custom-field requirements provider.

Prints the requirement forest, the parent requirement or the tags of a set of
issues, or the releases read from the release custom field.
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from jira_requirements.clients.exceptions import JiraError
from jira_requirements.config import get_settings, logger
from jira_requirements.config_loader import ConfigurationError
from jira_requirements.display import (
    configure_logging,
    console,
    render_releases,
    render_requirements,
    render_tags,
)
from jira_requirements.providers import (
    JiraCustomFieldsRequirementsProvider,
    RequirementsProviderError,
)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with one subcommand per provider query."""
    parser = argparse.ArgumentParser(
        prog="jira-requirements",
        description="Read requirements, tags and releases from JIRA custom fields",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="YAML configuration file (default: config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        help="Override the configured log level (DEBUG, INFO, WARNING, ...)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")
    subparsers.add_parser("requirements", help="Show the requirement tree")

    parent_parser = subparsers.add_parser(
        "parent",
        help="Show the most specific requirement of a test outcome",
    )
    parent_parser.add_argument("issue_keys", nargs="+", metavar="KEY", help="Issue keys of the outcome")

    tags_parser = subparsers.add_parser("tags", help="Show the tags of a test outcome")
    tags_parser.add_argument("issue_keys", nargs="+", metavar="KEY", help="Issue keys of the outcome")

    subparsers.add_parser("releases", help="Show the releases from the release custom field")
    return parser


def run_command(provider: JiraCustomFieldsRequirementsProvider, args: argparse.Namespace) -> int:
    """Execute one subcommand against the provider and print its result."""
    match args.command:
        case "requirements":
            console.print(render_requirements(provider.get_requirements()))
        case "parent":
            requirements = provider.get_associated_requirements(args.issue_keys)
            if not requirements:
                logger.warning("No requirement found for %s", ", ".join(args.issue_keys))
                return 1
            parent, *ancestors = requirements
            chain = " > ".join(r.name for r in (*ancestors, parent))
            console.print(f"[bold]{parent.name}[/] [dim]({parent.type})[/]: {chain}")
        case "tags":
            console.print(render_tags(provider.get_tags_for(args.issue_keys)))
        case "releases":
            if not provider.is_active():
                logger.notice("Custom field releases are disabled; fixVersions are used for version tags")
            console.print(render_releases(provider.get_releases()))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Parse arguments and execute the appropriate command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        settings = get_settings(args.config)
    except ConfigurationError as e:
        logger.error("Configuration failed: %s", e)
        sys.exit(1)

    configure_logging(args.log_level or settings.log_level, settings.log_file)

    try:
        provider = JiraCustomFieldsRequirementsProvider(settings)
        sys.exit(run_command(provider, args))
    except (JiraError, RequirementsProviderError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()

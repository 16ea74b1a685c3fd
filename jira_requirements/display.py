"""
Centralized display utilities for console output and logging.
Provides the rich logging setup and renderers for requirement trees and tags.
"""

import logging
import os
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol, cast

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme
from rich.tree import Tree

if TYPE_CHECKING:
    from jira_requirements.models import Release, Requirement, TestTag

LOGGER_NAME = "jira_requirements"


# Define Protocol for extended Logger with success and notice methods
class ExtendedLogger(Protocol):
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def success(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def notice(self, msg: str, *args: Any, **kwargs: Any) -> None: ...
    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


LOGGING_THEME = Theme(
    {
        "logging.level.debug": "dim",
        "logging.level.info": "blue",
        "logging.level.notice": "cyan",
        "logging.level.warning": "bold yellow",
        "logging.level.error": "bold red",
        "logging.level.critical": "bold red on white",
        "logging.level.success": "bold green",
    }
)

# Global console instance with theme
console = Console(theme=LOGGING_THEME)

rich_handler = RichHandler(
    console=console,
    rich_tracebacks=True,
    tracebacks_show_locals=False,
    markup=True,
    show_time=True,
    show_level=True,
    enable_link_path=True,
    log_time_format="[%X.%f]",
)


SUCCESS = 25
NOTICE = 21


def _success(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(SUCCESS):
        kwargs["extra"] = kwargs.get("extra", {})
        kwargs["extra"]["markup"] = True
        self._log(SUCCESS, f"[success]{message}[/]", args, stacklevel=2, **kwargs)


def _notice(self: logging.Logger, message: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(NOTICE):
        kwargs["extra"] = kwargs.get("extra", {})
        kwargs["extra"]["markup"] = True
        self._log(NOTICE, message, args, stacklevel=2, **kwargs)


def register_custom_levels() -> None:
    """Add the SUCCESS and NOTICE levels and their logger methods."""
    # SUCCESS sits between INFO and WARNING, NOTICE just above INFO
    logging.addLevelName(SUCCESS, "SUCCESS")
    logging.addLevelName(NOTICE, "NOTICE")
    setattr(logging.Logger, "success", _success)
    setattr(logging.Logger, "notice", _notice)


def get_logger() -> ExtendedLogger:
    """Package logger with the custom levels, leaving handlers to the application."""
    register_custom_levels()
    return cast(ExtendedLogger, logging.getLogger(LOGGER_NAME))


def configure_logging(
    level: str = "INFO", log_file: str | None = None
) -> ExtendedLogger:
    """
    Configure logging with rich formatting.

    Replaces the root logger's handlers, so only the command line entry
    point calls it.

    Args:
        level: Logging level (DEBUG, INFO, NOTICE, SUCCESS, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file

    Returns:
        Configured logger instance
    """
    if level.upper() == "NOTICE":
        numeric_level = NOTICE
    elif level.upper() == "SUCCESS":
        numeric_level = SUCCESS
    else:
        numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [rich_handler]

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_format = logging.Formatter(
            "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
        )
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(file_format)
        file_handler.setLevel(numeric_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        datefmt="[%X.%f]",
        handlers=handlers,
        force=True,
    )

    logger = get_logger()
    logger.debug("Rich logging configured at level %s", level.upper())
    if log_file:
        logger.debug("Log file: %s", log_file)

    return logger


def _add_requirement_branch(tree: Tree, requirement: "Requirement") -> None:
    branch = tree.add(f"[bold]{requirement.name}[/] [dim]({requirement.type})[/]")
    for child in requirement.children:
        _add_requirement_branch(branch, child)


def render_requirements(
    requirements: Iterable["Requirement"], title: str = "Requirements"
) -> Tree:
    """Build a rich tree showing each requirement with its type."""
    tree = Tree(f"[bold blue]{title}[/]")
    for requirement in requirements:
        _add_requirement_branch(tree, requirement)
    return tree


def _add_release_branch(tree: Tree, release: "Release") -> None:
    branch = tree.add(f"[bold]{release.name}[/] [dim]({release.label})[/]")
    for child in release.children:
        _add_release_branch(branch, child)


def render_releases(releases: Iterable["Release"], title: str = "Releases") -> Tree:
    """Build a rich tree of releases labelled by their release type."""
    tree = Tree(f"[bold blue]{title}[/]")
    for release in releases:
        _add_release_branch(tree, release)
    return tree


def render_tags(tags: Iterable["TestTag"], title: str = "Tags") -> Table:
    """Build a table of tags sorted by type then name."""
    table = Table(title=title)
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    for tag in sorted(tags, key=lambda t: (t.type, t.name)):
        table.add_row(tag.type, tag.name)
    return table

"""Main CLI entry point for the pmk command.

This module provides the Typer application that serves as the entry point
for the pmk command-line tool. Global options (verbosity, log directory,
color) are taken by the app callback and apply to every subcommand.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from prosemark.cli.add_command import AddCommand
from prosemark.cli.config import resolve_project_dir
from prosemark.cli.edit_command import EditCommand
from prosemark.cli.errors import CLIError, exit_code_for
from prosemark.cli.init_command import InitCommand
from prosemark.cli.models import ExitCode
from prosemark.cli.output import OutputHandler, sanitize_path
from prosemark.cli.parse_command import ParseCommand
from prosemark.node.models import NodePart

VERSION = "0.1.0"

app = typer.Typer(
    name="pmk",
    help="""Manage a prosemark writing project: a binder outline of node files.

QUICK START:
  pmk init                                   # Create _binder.md and .prosemark.yml
  pmk add --new --title "Chapter One"        # Create a node and link it under the root
  pmk add --new --title "Scene" --edit       # ...then open it in $EDITOR
  pmk add --parent chapter-one --target notes.md  # Link an existing file
  pmk edit <id> --part notes                 # Edit a node's notes
  pmk parse --json                           # Print the binder tree as JSON""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

# Module logger
logger = logging.getLogger(__name__)


# -v count -> level; anything above 1 means DEBUG
LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}
CONSOLE_LOG_FORMAT = "%(asctime)s [%(levelname)8s] %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _formatted(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
    return handler


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Route the 'prosemark' logger to stderr and, with logdir, to a log file.

    The root logger is left alone so third-party libraries keep their own
    settings. Handlers installed by an earlier call are closed and replaced.

    Args:
        verbosity: Number of -v flags
        logdir: Directory that receives a timestamped pmk_*.log file
    """
    level = LOG_LEVELS.get(verbosity, logging.DEBUG)

    app_logger = logging.getLogger("prosemark")
    for stale in list(app_logger.handlers):
        app_logger.removeHandler(stale)
        stale.close()
    app_logger.setLevel(level)

    handlers = [_formatted(logging.StreamHandler(sys.stderr), level, CONSOLE_LOG_FORMAT)]
    if logdir:
        log_dir = Path(logdir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / datetime.now().strftime("pmk_%Y%m%d_%H%M%S.log")
        handlers.append(_formatted(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_LOG_FORMAT))

    for handler in handlers:
        app_logger.addHandler(handler)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pmk version {VERSION}")
        raise typer.Exit()


def _output(ctx: typer.Context) -> OutputHandler:
    settings = ctx.obj or {}
    return OutputHandler(
        verbosity=settings.get("verbosity", 0),
        no_color=settings.get("no_color", False),
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Manage a prosemark writing project."""
    _configure_logging(verbosity, logdir)
    ctx.obj = {"verbosity": verbosity, "no_color": no_color}


@app.command("init")
def init_command(
    ctx: typer.Context,
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="Project directory (default: current directory)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing files",
    ),
) -> None:
    """Initialize a prosemark project."""
    output = _output(ctx)

    try:
        project_dir = resolve_project_dir(project)
        result = InitCommand().run(project_dir, force=force)
    except CLIError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(str(e))
        raise typer.Exit(exit_code_for(e))

    if result.overwrote:
        output.warning("overwriting existing files")
    output.success(f"Initialized {sanitize_path(result.project_dir)}")
    output.info(f"  Binder: {sanitize_path(result.binder_path)}")
    output.info(f"  Config: {sanitize_path(result.config_path)}")
    raise typer.Exit(ExitCode.SUCCESS)


@app.command("add")
def add_command(
    ctx: typer.Context,
    parent: str = typer.Option(".", "--parent", help="Parent selector (\".\" is the root)"),
    target: str = typer.Option("", "--target", help="Target path of the child (generated with --new)"),
    title: str = typer.Option("", "--title", help="Display title (empty = derive from the target)"),
    synopsis: str = typer.Option("", "--synopsis", help="Synopsis frontmatter field (at most 2000 bytes of UTF-8)"),
    new: bool = typer.Option(False, "--new", help="Create a new node file"),
    edit: bool = typer.Option(False, "--edit", help="Open the new node in $EDITOR after creation"),
    force: bool = typer.Option(False, "--force", help="Allow a duplicate target under the same parent"),
    first: bool = typer.Option(False, "--first", help="Insert as the first child"),
    at: Optional[int] = typer.Option(None, "--at", help="Zero-based insertion index"),
    before: str = typer.Option("", "--before", help="Insert before this sibling"),
    after: str = typer.Option("", "--after", help="Insert after this sibling"),
    json_mode: bool = typer.Option(False, "--json", help="Output the result as JSON"),
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="Project directory containing _binder.md (default: current directory)",
    ),
) -> None:
    """Add a child node to the binder."""
    exit_code = AddCommand(output_handler=_output(ctx)).run(
        parent=parent,
        target=target,
        title=title,
        synopsis=synopsis,
        new=new,
        edit=edit,
        force=force,
        first=first,
        at=at,
        before=before,
        after=after,
        json_mode=json_mode,
        project=project,
    )
    raise typer.Exit(exit_code)


@app.command("edit")
def edit_command(
    ctx: typer.Context,
    node_id: str = typer.Argument(..., help="Node ID (filename without .md)"),
    part: NodePart = typer.Option(NodePart.DRAFT, "--part", help="Which part to edit"),
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="Project directory containing _binder.md (default: current directory)",
    ),
) -> None:
    """Open a node in $EDITOR."""
    exit_code = EditCommand(output_handler=_output(ctx)).run(node_id, part=part.value, project=project)
    raise typer.Exit(exit_code)


@app.command("parse")
def parse_command(
    ctx: typer.Context,
    json_mode: bool = typer.Option(False, "--json", help="Output the tree and diagnostics as JSON"),
    project: Optional[str] = typer.Option(
        None,
        "--project",
        help="Project directory containing _binder.md (default: current directory)",
    ),
) -> None:
    """Print the binder outline and its diagnostics."""
    exit_code = ParseCommand(output_handler=_output(ctx)).run(json_mode=json_mode, project=project)
    raise typer.Exit(exit_code)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m prosemark.cli.main
if __name__ == "__main__":
    main()

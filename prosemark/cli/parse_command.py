"""ParseCommand: print the binder outline and its lint diagnostics."""

import logging
from typing import Iterator, List, Optional, Tuple

from prosemark.binder.errors import BinderParseError
from prosemark.binder.models import BinderNode, Diagnostic, ParseResult, has_error
from prosemark.binder.parser import parse_binder
from prosemark.errors import ProsemarkError
from prosemark.workflow.errors import StepError
from prosemark.workflow.node_io import FileNodeCreationIO, NodeCreationIO
from .config import resolve_binder_path
from .errors import ProjectNotInitializedError, exit_code_for
from .models import ExitCode, ParseOutput
from .output import OutputHandler, sanitize_path

logger = logging.getLogger(__name__)

PARSE_ERRORS_MESSAGE = "binder has parse errors"


def outline_lines(node: BinderNode, depth: int = 0) -> Iterator[str]:
    """Indented "title (target)" lines for every node below node."""
    for child in node.children:
        yield f"{'  ' * depth}{sanitize_path(child.title)} ({sanitize_path(child.target)})"
        yield from outline_lines(child, depth + 1)


class ParseCommand:
    """Reads the binder and reports its tree, never modifying anything.

    Example:
        >>> exit_code = ParseCommand().run(json_mode=True)
    """

    def __init__(self, output_handler: Optional[OutputHandler] = None, io: Optional[NodeCreationIO] = None):
        self.output_handler = output_handler or OutputHandler()
        self.io = io or FileNodeCreationIO()

    def run(self, json_mode: bool = False, project: Optional[str] = None) -> ExitCode:
        """Execute the parse command.

        Returns:
            SUCCESS, DIAGNOSTIC_ERROR when the binder has error diagnostics,
            or the exit code of the failure
        """
        try:
            parsed, diagnostics = self._parse(project)
        except ProsemarkError as e:
            logger.error(f"parse failed: {e}")
            self.output_handler.error(str(e))
            return exit_code_for(e)
        except Exception as e:
            logger.exception("Unexpected error during parse")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

        if json_mode:
            self.output_handler.print_json(ParseOutput(root=parsed.root, diagnostics=diagnostics).to_dict())
        else:
            for line in outline_lines(parsed.root):
                self.output_handler.print(line)
            self.output_handler.print_diagnostics(diagnostics)

        if has_error(diagnostics):
            self.output_handler.error(PARSE_ERRORS_MESSAGE)
            return ExitCode.DIAGNOSTIC_ERROR
        return ExitCode.SUCCESS

    def _parse(self, project: Optional[str]) -> Tuple[ParseResult, List[Diagnostic]]:
        binder_path = resolve_binder_path(project)
        try:
            binder_bytes = self.io.read_binder(binder_path)
        except FileNotFoundError:
            raise ProjectNotInitializedError(binder_path)
        except Exception as e:
            raise StepError("reading binder", e) from e

        try:
            parsed, diagnostics = parse_binder(binder_bytes)
        except BinderParseError as e:
            raise StepError("parsing binder", e) from e
        logger.debug(f"Parsed {binder_path}: {len(diagnostics)} diagnostic(s)")
        return parsed, diagnostics

"""Console output formatting utilities for daxgen."""

from __future__ import annotations

import sys
from typing import List, Optional, Sequence

from ..errors import WorkflowError
from ..workflow import Workflow


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_summary(self, workflow: Workflow, source: str) -> None:
        """Print what a workflow contains."""
        edges = workflow.dependencies()
        print(f"\nWORKFLOW: {workflow.name}")
        print(f"Source: {source}")
        print(f"Files: {len(workflow.files)}")
        print(f"Executables: {len(workflow.executables)}")
        print(f"Jobs: {len(workflow.jobs)}")
        print(f"Dependencies: {len(edges)} ({workflow.dependency_policy})")

    def print_plan(self, levels: Sequence[Sequence[str]]) -> None:
        """Print topological stages; jobs in one stage are independent."""
        self.print_header("PLAN")
        for idx, level in enumerate(levels):
            print(f"  Stage {idx + 1}: {', '.join(level)}")

    def print_validation(self, errors: List[WorkflowError]) -> None:
        """Print a validation report."""
        if not errors:
            print("VALID: no problems found")
            return
        print(f"INVALID: {len(errors)} problem(s)", file=sys.stderr)
        for e in errors:
            print(f"  {e.kind}: {e.message}", file=sys.stderr)

    def print_written(self, path: str, workflow: Workflow) -> None:
        """Print DAX write confirmation."""
        print(f"Wrote {path} ({len(workflow.jobs)} jobs, {len(workflow.dependencies())} dependencies)")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_workflow_error(self, exc: WorkflowError) -> None:
        """Print a WorkflowError with its structured details."""
        details = [f"{k}: {v}" for k, v in exc.details.items()]
        self.print_error(exc.kind, exc.message, details=details or None)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console

# cli.py
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from daxgen.config import get_settings
from daxgen.dax import read_dax, write_dax
from daxgen.errors import WorkflowError
from daxgen.loader import find_workflow_files, load_workflow
from daxgen.ui.console import Console, get_console, set_console
from daxgen.validator import Validator


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument or default.

    Args:
        workflow_arg: Optional workflow argument from CLI

    Returns:
        Path to workflow file

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and workflow_path.suffix != ".py":
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  daxgen generate --workflow my_workflow.py",
            )
            sys.exit(1)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow files.",
            details=[
                "Looked for:",
                "  workflow.py",
                "  *_workflow.py",
            ],
            suggestion="Create a workflow file or specify one explicitly:\n  daxgen generate --workflow my_workflow.py",
        )
        sys.exit(1)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion="Specify a workflow explicitly:\n  daxgen generate --workflow blackdiamond_workflow.py",
        )
        sys.exit(1)

    return workflow_files[0]


def _load(ctx, workflow, policy):
    console = get_console()
    workflow_path = discover_workflow(workflow)
    try:
        wf = load_workflow(workflow_path, dependency_policy=policy)
    except WorkflowError as e:
        console.print_workflow_error(e)
        sys.exit(1)
    except Exception as e:
        console.print_error(
            "Failed to load workflow",
            f"Could not load workflow from {workflow_path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)
    console.print_debug(f"Loaded {wf!r} from {workflow_path}")
    return wf, workflow_path


_policy_option = click.option(
    "--policy",
    type=click.Choice(["inferred", "explicit"]),
    default=None,
    help="Dependency policy (defaults to DAXGEN_DEPENDENCY_POLICY or the script's choice)",
)
_workflow_option = click.option(
    "--workflow",
    default=None,
    help="Workflow script path (defaults to workflow.py or a single *_workflow.py)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """daxgen: build, validate and write DAX workflow descriptions."""
    console = Console(debug=debug)
    set_console(console)
    level = logging.DEBUG if debug else getattr(logging, get_settings().log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@_workflow_option
@click.option("-o", "--output", required=True, help="DAX file to write ('-' for stdout)")
@_policy_option
@click.option("--validate/--no-validate", default=True, show_default=True, help="Validate before writing")
@click.pass_context
def generate(ctx, workflow, output, policy, validate):
    """Write a workflow script's DAX."""
    console = get_console()
    wf, _ = _load(ctx, workflow, policy)

    try:
        if output == "-":
            write_dax(wf, sys.stdout, validate=validate)
        else:
            write_dax(wf, output, validate=validate)
            console.print_written(output, wf)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except WorkflowError as e:
        console.print_workflow_error(e)
        if ctx.obj.get("debug", False):
            import traceback
            traceback.print_exc()
        sys.exit(1)


@cli.command()
@_workflow_option
@_policy_option
@click.pass_context
def validate(ctx, workflow, policy):
    """Report every problem in a workflow script."""
    console = get_console()
    wf, workflow_path = _load(ctx, workflow, policy)

    console.print_summary(wf, workflow_path.name)
    errors = Validator(wf).check()
    console.print_validation(errors)
    if errors:
        sys.exit(1)


@cli.command()
@_workflow_option
@_policy_option
@click.pass_context
def plan(ctx, workflow, policy):
    """Print the stages a planner could run in parallel."""
    console = get_console()
    wf, _ = _load(ctx, workflow, policy)

    try:
        levels = Validator(wf).levels()
    except WorkflowError as e:
        console.print_workflow_error(e)
        sys.exit(1)
    console.print_plan(levels)


@cli.command()
@click.argument("dax_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def inspect(ctx, dax_file):
    """Read a DAX file and summarize it."""
    console = get_console()
    try:
        wf = read_dax(Path(dax_file))
    except WorkflowError as e:
        console.print_workflow_error(e)
        sys.exit(1)

    console.print_summary(wf, dax_file)
    errors = Validator(wf).check()
    console.print_validation(errors)
    if errors:
        sys.exit(1)


if __name__ == "__main__":
    cli()

# loader.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import List, Optional

from .workflow import POLICIES, Workflow


def find_workflow_files(directory: str | Path = ".") -> List[Path]:
    """
    Find workflow generator scripts in a directory.

    Looks for workflow.py first, then any *_workflow.py.
    """
    current_dir = Path(directory)
    workflow_files = []

    default_workflow = current_dir / "workflow.py"
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for path in current_dir.glob("*_workflow.py"):
        if path != default_workflow:
            workflow_files.append(path)

    return sorted(workflow_files)


def load_workflow(path: str | Path, *, dependency_policy: Optional[str] = None) -> Workflow:
    """
    Load a workflow from a python file path.

    The file must define either:
      - workflow() -> Workflow
      - WORKFLOW = Workflow(...)

    dependency_policy, when given, overrides the policy the script chose.
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"daxgen_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    result = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        result = globals_dict["workflow"]()
    elif "WORKFLOW" in globals_dict:
        result = globals_dict["WORKFLOW"]

    if not isinstance(result, Workflow):
        raise TypeError(
            "Workflow script must return/define a Workflow. "
            "Define workflow() -> Workflow or WORKFLOW = Workflow(...)."
        )

    if dependency_policy is not None:
        if dependency_policy not in POLICIES:
            raise ValueError(f"Unknown dependency policy: {dependency_policy}")
        result.dependency_policy = dependency_policy

    return result

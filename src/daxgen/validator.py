# validator.py
from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from .errors import (
    ConflictingProducer,
    CyclicGraph,
    UnknownExecutable,
    UnknownFile,
    WorkflowError,
)
from .registry import format_key
from .workflow import Workflow

log = logging.getLogger(__name__)


def build_dag(workflow: Workflow) -> Tuple[Dict[str, List[str]], Dict[str, int]]:
    """
    Build adjacency + in-degree maps over the workflow's jobs.

    Edges come from workflow.dependencies(), so the dependency policy
    decides whether usage-implied edges take part.
    Adjacency lists keep edge insertion order.
    """
    adj: Dict[str, List[str]] = {j.id: [] for j in workflow.jobs}
    indeg: Dict[str, int] = {j.id: 0 for j in workflow.jobs}

    for edge in workflow.dependencies():
        if edge.child not in adj[edge.parent]:
            adj[edge.parent].append(edge.child)
            indeg[edge.child] += 1

    return adj, indeg


def topo_levels(adj: Dict[str, List[str]], indeg: Dict[str, int]) -> List[List[str]]:
    """
    Convert the DAG into topological "levels" (stages).
    Jobs inside a stage have no dependencies on each other.
    Raises CyclicGraph if some jobs can never be scheduled.
    """
    indeg = dict(indeg)  # copy (we mutate it)
    order = list(indeg)  # job insertion order
    q = deque([n for n in order if indeg[n] == 0])

    levels: List[List[str]] = []
    processed = 0

    while q:
        level_size = len(q)
        level: List[str] = []

        for _ in range(level_size):
            node = q.popleft()
            level.append(node)
            processed += 1

            for child in adj.get(node, []):
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)

        levels.append(level)

    if processed != len(indeg):
        stuck = [n for n in order if indeg[n] > 0]
        cycle = find_cycle(adj, stuck) or stuck
        raise CyclicGraph(
            f"Job graph has a cycle: {' -> '.join(cycle)}",
            cycle=cycle,
            stuck_jobs=stuck,
        )

    return levels


WHITE, GREY, BLACK = 0, 1, 2


def find_cycle(adj: Dict[str, List[str]], nodes: Optional[List[str]] = None) -> List[str]:
    """
    Return one cycle as [a, b, ..., a], or [] if there is none.

    Three-colour iterative DFS; `nodes` restricts the start points
    (e.g. to the jobs Kahn's algorithm could not order).
    """
    color: Dict[str, int] = {n: WHITE for n in adj}
    starts = nodes if nodes is not None else list(adj)

    for start in starts:
        if color[start] != WHITE:
            continue
        path: List[str] = [start]
        stack = [iter(adj.get(start, []))]
        color[start] = GREY
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                color[path.pop()] = BLACK
                stack.pop()
                continue
            if color[nxt] == GREY:
                return path[path.index(nxt):] + [nxt]
            if color[nxt] == WHITE:
                color[nxt] = GREY
                path.append(nxt)
                stack.append(iter(adj.get(nxt, [])))
    return []


class Validator:
    """
    Read-only checks over a workflow:
      - every job's executable is declared
      - every file a job uses or names in its arguments is declared
      - no file has more than one producing job
      - the dependency graph is acyclic
    """

    def __init__(self, workflow: Workflow):
        self.workflow = workflow

    def check(self) -> List[WorkflowError]:
        """Return every violation found (empty list means valid)."""
        errors: List[WorkflowError] = []
        errors.extend(self._check_executables())
        errors.extend(self._check_files())
        errors.extend(self._check_producers())
        try:
            self.levels()
        except CyclicGraph as e:
            errors.append(e)
        log.debug("validated workflow %s: %d error(s)", self.workflow.name, len(errors))
        return errors

    def validate(self) -> None:
        """Raise the first violation found."""
        errors = self.check()
        if errors:
            raise errors[0]

    def levels(self) -> List[List[str]]:
        adj, indeg = build_dag(self.workflow)
        return topo_levels(adj, indeg)

    def _check_executables(self) -> List[WorkflowError]:
        registry = self.workflow.registry
        out: List[WorkflowError] = []
        for job in self.workflow.jobs:
            if not registry.has_executable(*job.executable_key):
                out.append(UnknownExecutable(
                    f"Job '{job.id}' references undeclared executable '{format_key(job.executable_key)}'",
                    job=job.id,
                    executable=format_key(job.executable_key),
                ))
        return out

    def _check_files(self) -> List[WorkflowError]:
        registry = self.workflow.registry
        out: List[WorkflowError] = []
        for job in self.workflow.jobs:
            for name in job.referenced_files():
                if not registry.has_file(name):
                    out.append(UnknownFile(
                        f"Job '{job.id}' references undeclared file '{name}'",
                        job=job.id,
                        file=name,
                    ))
        return out

    def _check_producers(self) -> List[WorkflowError]:
        producers: Dict[str, List[str]] = {}
        for job in self.workflow.jobs:
            for name in job.outputs():
                producers.setdefault(name, []).append(job.id)

        out: List[WorkflowError] = []
        for name, jobs in producers.items():
            if len(jobs) > 1:
                out.append(ConflictingProducer(
                    f"File '{name}' is produced by more than one job: {', '.join(jobs)}",
                    file=name,
                    jobs=jobs,
                ))
        return out


def validate(workflow: Workflow) -> None:
    Validator(workflow).validate()


def topological_levels(workflow: Workflow) -> List[List[str]]:
    """Stages of job ids; every job's parents sit in earlier stages."""
    return Validator(workflow).levels()


def topological_order(workflow: Workflow) -> List[str]:
    return [job_id for level in topological_levels(workflow) for job_id in level]

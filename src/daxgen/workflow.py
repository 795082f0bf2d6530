# workflow.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Any, Dict, List, Optional, Union

from .config import get_settings
from .errors import ConfigError, DuplicateEdge, DuplicateJobId, UnknownJob
from .model import Executable, Job, LogicalFile
from .profiles import ProfileStore
from .registry import EntityRegistry

log = logging.getLogger(__name__)

POLICIES = ("inferred", "explicit")


@dataclass(frozen=True)
class Dependency:
    """Edge parent -> child: parent must finish before child starts."""
    parent: str
    child: str


JobLike = Union[Job, str]


def _job_id(job: JobLike) -> str:
    return job.id if isinstance(job, Job) else job


class Workflow:
    """
    Aggregate root of a workflow description (a DAX "ADAG").

    Owns the entity registry, the jobs (in insertion order) and the explicit
    dependency edges. Mutators return the workflow so calls can be chained:

        wf = (Workflow("diamond")
              .add_files(fa, fb)
              .add_executable(preprocess)
              .add_job(j1)
              .add_dependency("j1", "j2"))
    """

    def __init__(self, name: str, *, dependency_policy: Optional[str] = None):
        if not name:
            raise ValueError("workflow name must be non-empty")
        policy = dependency_policy or get_settings().dependency_policy
        if policy not in POLICIES:
            raise ConfigError(
                f"Unknown dependency policy '{policy}'",
                known_policies=list(POLICIES),
            )
        self.name = name
        self.dependency_policy = policy
        self.registry = EntityRegistry()
        self._profiles = ProfileStore()
        self._jobs: Dict[str, Job] = {}
        self._edges: List[Dependency] = []

    def __repr__(self) -> str:
        return (
            f"Workflow(name={self.name!r}, jobs={len(self._jobs)}, "
            f"edges={len(self._edges)}, policy={self.dependency_policy!r})"
        )

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def add_file(self, file: LogicalFile) -> "Workflow":
        self.registry.add_file(file)
        return self

    def add_files(self, *files: LogicalFile) -> "Workflow":
        for f in files:
            self.registry.add_file(f)
        return self

    def declare_file(self, name: str) -> LogicalFile:
        return self.registry.declare_file(name)

    def add_executable(self, executable: Executable) -> "Workflow":
        self.registry.add_executable(executable)
        return self

    def add_executables(self, *executables: Executable) -> "Workflow":
        for e in executables:
            self.registry.add_executable(e)
        return self

    def declare_executable(self, namespace: str, name: str, version: str) -> Executable:
        return self.registry.declare_executable(namespace, name, version)

    @property
    def files(self) -> List[LogicalFile]:
        return self.registry.files

    @property
    def executables(self) -> List[Executable]:
        return self.registry.executables

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def add_profile(self, owner: Any, namespace: str, key: str, value: Any) -> "Workflow":
        """Attach a hint to a job (or job id), executable, file or usage."""
        if isinstance(owner, str):
            owner = self.job(owner)
        self._profiles.set_profile(owner, namespace, key, value)
        return self

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def add_job(self, job: Job) -> "Workflow":
        if job.id in self._jobs:
            raise DuplicateJobId(f"Job id '{job.id}' already exists", job=job.id)
        self._jobs[job.id] = job
        log.debug("added job %s (%s::%s:%s)", job.id, *job.executable_key)
        return self

    def add_jobs(self, *jobs: Job) -> "Workflow":
        for j in jobs:
            self.add_job(j)
        return self

    def job(self, job_id: str) -> Job:
        try:
            return self._jobs[job_id]
        except KeyError:
            raise UnknownJob(
                f"Job '{job_id}' is not in workflow '{self.name}'",
                job=job_id,
                known_jobs=sorted(self._jobs),
            ) from None

    @property
    def jobs(self) -> List[Job]:
        return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job: object) -> bool:
        if isinstance(job, Job):
            return self._jobs.get(job.id) is job
        return job in self._jobs

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def add_dependency(self, parent: JobLike, child: JobLike) -> "Workflow":
        parent_id, child_id = _job_id(parent), _job_id(child)
        missing = [j for j in (parent_id, child_id) if j not in self._jobs]
        if missing:
            raise UnknownJob(
                f"Dependency {parent_id} -> {child_id} references unknown job(s): {', '.join(missing)}",
                parent=parent_id,
                child=child_id,
                known_jobs=sorted(self._jobs),
            )
        edge = Dependency(parent_id, child_id)
        if edge in self._edges:
            raise DuplicateEdge(
                f"Dependency {parent_id} -> {child_id} already exists",
                parent=parent_id,
                child=child_id,
            )
        self._edges.append(edge)
        log.debug("added dependency %s -> %s", parent_id, child_id)
        return self

    @property
    def explicit_dependencies(self) -> List[Dependency]:
        return list(self._edges)

    def producers(self) -> Dict[str, str]:
        """file name -> id of the first job that declares it as OUTPUT."""
        out: Dict[str, str] = {}
        for job in self._jobs.values():
            for name in job.outputs():
                out.setdefault(name, job.id)
        return out

    def inferred_dependencies(self) -> List[Dependency]:
        """
        Producer -> consumer edges implied by shared files.

        Ordered by consumer job insertion order, then usage order.
        """
        producers = self.producers()
        edges: List[Dependency] = []
        for job in self._jobs.values():
            for name in job.inputs():
                parent = producers.get(name)
                if parent is None or parent == job.id:
                    continue
                edge = Dependency(parent, job.id)
                if edge not in edges:
                    edges.append(edge)
        return edges

    def dependencies(self) -> List[Dependency]:
        """The edge set validated and written, according to the dependency policy."""
        edges = list(self._edges)
        if self.dependency_policy == "inferred":
            for edge in self.inferred_dependencies():
                if edge not in edges:
                    edges.append(edge)
        return edges

    def parents(self, job: JobLike) -> List[str]:
        job_id = self.job(_job_id(job)).id
        return [e.parent for e in self.dependencies() if e.child == job_id]

    def children(self, job: JobLike) -> List[str]:
        job_id = self.job(_job_id(job)).id
        return [e.child for e in self.dependencies() if e.parent == job_id]

    # ------------------------------------------------------------------
    # Validation / output
    # ------------------------------------------------------------------

    def validate(self) -> "Workflow":
        from .validator import validate

        validate(self)
        return self

    def check(self) -> list:
        from .validator import Validator

        return Validator(self).check()

    def to_xml(self, *, validate: Optional[bool] = None) -> str:
        from .dax import DAXWriter

        if validate is None:
            validate = get_settings().validate_on_write
        if validate:
            self.validate()
        return DAXWriter(self).to_string()

    def write_to(self, target: Union[str, "IO[str]", Any], *, validate: Optional[bool] = None) -> "Workflow":
        from .dax import write_dax

        write_dax(self, target, validate=validate)
        return self

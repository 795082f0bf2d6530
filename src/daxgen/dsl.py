# src/daxgen/dsl.py
from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

from .model import OS, Arch, Executable, Job, Link, LogicalFile
from .workflow import Workflow


# ---------------------------------------------------------------------
# Entity helpers
# ---------------------------------------------------------------------

def lfn(name: str, *pfns: Union[str, Tuple[str, str]], register: bool = False) -> LogicalFile:
    """
    Create a logical file.

    pfns are URLs (site "local") or (url, site) pairs:
        lfn("f.a", "file:///data/f.a")
        lfn("f.a", ("gsiftp://host/f.a", "condorpool"))
    """
    f = LogicalFile(name)
    for pfn in pfns:
        if isinstance(pfn, tuple):
            f.add_physical_file(*pfn)
        else:
            f.add_physical_file(pfn)
    return f.set_register(register)


def exe(
    namespace: str,
    name: str,
    version: str,
    pfn: Optional[str] = None,
    *,
    site: str = "local",
    arch: Union[Arch, str] = Arch.X86_64,
    os: Union[OS, str] = OS.LINUX,
    installed: bool = True,
) -> Executable:
    """Create an executable, optionally with one physical location."""
    e = Executable(namespace, name, version).set_architecture(arch).set_os(os).set_installed(installed)
    if pfn is not None:
        e.add_physical_file(pfn, site)
    return e


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    id: str,
    executable: Executable,
    *args: Union[str, LogicalFile],  # allow: job("j1", pre, "-i ", fa)
    inputs: Sequence[Union[str, LogicalFile]] = (),
    outputs: Sequence[Union[str, LogicalFile]] = (),
    profiles: Optional[Dict[Tuple[str, str], str]] = None,
) -> Job:
    j = Job.of(id, executable).add_argument(*args)
    for f in inputs:
        j.uses(f, Link.INPUT)
    for f in outputs:
        j.uses(f, Link.OUTPUT)
    for (namespace, key), value in (profiles or {}).items():
        j.add_profile(namespace, key, value)
    return j


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(
    name: str,
    *items: Union[LogicalFile, Executable, Job],
    edges: Iterable[Tuple[str, str]] = (),
    dependency_policy: Optional[str] = None,
) -> Workflow:
    """
    Workflow definition helper.

    Users can write:
        from daxgen import wf, lfn, exe, job

        def workflow():
            fa = lfn("f.a", "file:///data/f.a")
            fb = lfn("f.b")
            cat = exe("demo", "cat", "1.0")
            return wf(
                "copy",
                fa, fb, cat,
                job("j1", cat, fa, inputs=[fa], outputs=[fb]),
            )
    """
    w = Workflow(name, dependency_policy=dependency_policy)
    for item in items:
        if isinstance(item, LogicalFile):
            w.add_file(item)
        elif isinstance(item, Executable):
            w.add_executable(item)
        elif isinstance(item, Job):
            w.add_job(item)
        else:
            raise TypeError(f"wf() accepts files, executables and jobs, got {item!r}")
    for parent, child in edges:
        w.add_dependency(parent, child)
    return w

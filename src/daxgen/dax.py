# dax.py
"""
DAX (directed acyclic graph in XML) reader and writer.

The writer is deterministic: same workflow in, same bytes out. Element
order follows the DAX 3.6 schema (files, executables, jobs, then
child/parent edges) and within each section the caller's insertion order.
Attribute order is fixed per element.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import IO, Any, Iterable, List, Optional, Tuple, Union

from .config import get_settings
from .errors import DAXParseError, InvalidCharacter, IOFailure, WorkflowError
from .model import PFN, Executable, FileRef, Job, Link, LogicalFile
from .profiles import Profiles
from .workflow import Workflow

log = logging.getLogger(__name__)

DAX_NAMESPACE = "http://pegasus.isi.edu/schema/DAX"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
GENERATOR = "daxgen"

_ATTR_ESCAPES = [
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("\n", "&#10;"),
    ("\r", "&#13;"),
    ("\t", "&#9;"),
]
_TEXT_ESCAPES = [("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ("\r", "&#13;")]


# control characters XML 1.0 cannot carry, escaped or not
_FORBIDDEN = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f]")


def _escape(value: str, table) -> str:
    bad = _FORBIDDEN.search(value)
    if bad:
        raise InvalidCharacter(
            f"Character {bad.group()!r} cannot be written to DAX",
            value=repr(value),
            position=bad.start(),
        )
    for raw, repl in table:
        value = value.replace(raw, repl)
    return value


def _bool(value: bool) -> str:
    return "true" if value else "false"


Attrs = List[Tuple[str, str]]


class DAXWriter:
    """Render a Workflow as a DAX document string."""

    def __init__(self, workflow: Workflow, *, indent: Optional[int] = None):
        self.workflow = workflow
        self.indent = get_settings().indent if indent is None else indent
        self._lines: List[str] = []

    # ---- low level ----

    def _pad(self, depth: int) -> str:
        return " " * (self.indent * depth)

    @staticmethod
    def _open(tag: str, attrs: Attrs, close: bool = False) -> str:
        rendered = "".join(f' {k}="{_escape(v, _ATTR_ESCAPES)}"' for k, v in attrs)
        return f"<{tag}{rendered}{'/' if close else ''}>"

    def _empty(self, depth: int, tag: str, attrs: Attrs) -> None:
        self._lines.append(self._pad(depth) + self._open(tag, attrs, close=True))

    def _text(self, depth: int, tag: str, attrs: Attrs, text: str) -> None:
        self._lines.append(
            self._pad(depth) + self._open(tag, attrs) + _escape(text, _TEXT_ESCAPES) + f"</{tag}>"
        )

    def _start(self, depth: int, tag: str, attrs: Attrs) -> None:
        self._lines.append(self._pad(depth) + self._open(tag, attrs))

    def _end(self, depth: int, tag: str) -> None:
        self._lines.append(self._pad(depth) + f"</{tag}>")

    def _profiles(self, depth: int, profiles: Profiles) -> None:
        for p in profiles:
            self._text(depth, "profile", [("namespace", p.namespace), ("key", p.key)], p.value)

    def _pfns(self, depth: int, pfns: Iterable[PFN]) -> None:
        for pfn in pfns:
            self._empty(depth, "pfn", [("url", pfn.url), ("site", pfn.site)])

    # ---- sections ----

    def _header(self) -> Attrs:
        wf = self.workflow
        children = {e.child for e in wf.dependencies()}
        return [
            ("xmlns", DAX_NAMESPACE),
            ("xmlns:xsi", XSI_NAMESPACE),
            ("xsi:schemaLocation", f"{DAX_NAMESPACE} http://pegasus.isi.edu/schema/dax-{get_settings().dax_version}.xsd"),
            ("version", get_settings().dax_version),
            ("name", wf.name),
            ("index", "0"),
            ("count", "1"),
            ("jobCount", str(len(wf.jobs))),
            ("fileCount", str(len(wf.files))),
            ("childCount", str(len(children))),
        ]

    def _file(self, f: LogicalFile) -> None:
        attrs = [("name", f.name), ("register", _bool(f.register))]
        if not f.pfns and not len(f.profiles):
            self._empty(1, "file", attrs)
            return
        self._start(1, "file", attrs)
        self._profiles(2, f.profiles)
        self._pfns(2, f.pfns)
        self._end(1, "file")

    def _executable(self, e: Executable) -> None:
        attrs = [
            ("namespace", e.namespace),
            ("name", e.name),
            ("version", e.version),
            ("arch", e.arch.value),
            ("os", e.os.value),
            ("installed", _bool(e.installed)),
        ]
        if not e.pfns and not len(e.profiles):
            self._empty(1, "executable", attrs)
            return
        self._start(1, "executable", attrs)
        self._profiles(2, e.profiles)
        self._pfns(2, e.pfns)
        self._end(1, "executable")

    def _argument(self, job: Job) -> None:
        parts: List[str] = []
        for token in job.arguments:
            if isinstance(token, FileRef):
                parts.append(self._open("file", [("name", token.name)], close=True))
            else:
                parts.append(_escape(token, _TEXT_ESCAPES))
        self._lines.append(self._pad(2) + "<argument>" + "".join(parts) + "</argument>")

    def _job(self, job: Job) -> None:
        registry = self.workflow.registry
        self._start(1, "job", [
            ("id", job.id),
            ("namespace", job.namespace),
            ("name", job.name),
            ("version", job.version),
        ])
        if job.arguments:
            self._argument(job)
        self._profiles(2, job.profiles)
        for use in job.usages:
            attrs = [("name", use.file), ("link", use.link.value)]
            if use.link is Link.OUTPUT:
                register = registry.has_file(use.file) and registry.get_file(use.file).register
                attrs.append(("register", _bool(register)))
            attrs += [("transfer", _bool(use.transfer)), ("optional", _bool(use.optional))]
            if len(use.profiles):
                self._start(2, "uses", attrs)
                self._profiles(3, use.profiles)
                self._end(2, "uses")
            else:
                self._empty(2, "uses", attrs)
        self._end(1, "job")

    def _dependencies(self) -> None:
        edges = self.workflow.dependencies()
        for job in self.workflow.jobs:
            parents = [e.parent for e in edges if e.child == job.id]
            if not parents:
                continue
            self._start(1, "child", [("ref", job.id)])
            for parent in parents:
                self._empty(2, "parent", [("ref", parent)])
            self._end(1, "child")

    # ---- public ----

    def to_string(self) -> str:
        wf = self.workflow
        self._lines = ['<?xml version="1.0" encoding="UTF-8"?>', f"<!-- generated by {GENERATOR} -->"]
        self._start(0, "adag", self._header())
        for f in wf.files:
            self._file(f)
        for e in wf.executables:
            self._executable(e)
        for j in wf.jobs:
            self._job(j)
        self._dependencies()
        self._end(0, "adag")
        return "\n".join(self._lines) + "\n"

    def write(self, stream: IO[str]) -> None:
        stream.write(self.to_string())


def write_dax(
    workflow: Workflow,
    target: Union[str, Path, IO[str]],
    *,
    validate: Optional[bool] = None,
) -> None:
    """
    Validate (unless disabled) and write the workflow as DAX.

    A path target is written to a fresh temporary file beside it and moved
    into place only once the whole document is on disk, so a failed write
    never leaves a partial DAX behind. A stream target is written but not closed.
    """
    if validate is None:
        validate = get_settings().validate_on_write
    if validate:
        workflow.validate()

    text = DAXWriter(workflow).to_string()

    if hasattr(target, "write"):
        try:
            target.write(text)
        except (OSError, ValueError) as e:
            # ValueError: closed stream or an encoding the text does not fit
            raise IOFailure(f"Failed writing DAX for '{workflow.name}' to stream", cause=str(e)) from e
        log.debug("wrote DAX for %s to stream", workflow.name)
        return

    path = Path(target)
    tmp: Optional[Path] = None
    try:
        fd, name = tempfile.mkstemp(dir=path.parent, prefix=path.name + ".", suffix=".tmp")
        tmp = Path(name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        tmp.replace(path)
        tmp = None
    except (OSError, ValueError) as e:
        raise IOFailure(f"Failed writing DAX to {path}", path=str(path), cause=str(e)) from e
    finally:
        if tmp is not None:
            tmp.unlink(missing_ok=True)
    log.debug("wrote DAX for %s to %s (%d bytes)", workflow.name, path, len(text.encode("utf-8")))


# ----------------------------------------------------------------------
# Reading
# ----------------------------------------------------------------------

def _local(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""  # comments / processing instructions
    return tag.rsplit("}", 1)[-1]


def _children(elem: ET.Element, tag: str) -> List[ET.Element]:
    return [c for c in elem if _local(c.tag) == tag]


def _required(elem: ET.Element, attr: str) -> str:
    value = elem.get(attr)
    if value is None:
        raise DAXParseError(
            f"<{_local(elem.tag)}> is missing required attribute '{attr}'",
            element=_local(elem.tag),
            attribute=attr,
        )
    return value


def _as_bool(elem: ET.Element, attr: str, default: bool) -> bool:
    value = elem.get(attr)
    if value is None:
        return default
    if value.lower() in ("true", "1", "yes"):
        return True
    if value.lower() in ("false", "0", "no"):
        return False
    raise DAXParseError(
        f"<{_local(elem.tag)}> attribute '{attr}' is not a boolean: {value!r}",
        element=_local(elem.tag),
        attribute=attr,
    )


class DAXReader:
    """
    Build a Workflow back from a DAX document.

    The result uses the explicit dependency policy: the edges are exactly
    the <child>/<parent> pairs found in the document.
    """

    def __init__(self, root: ET.Element):
        if _local(root.tag) != "adag":
            raise DAXParseError(f"Root element must be <adag>, got <{_local(root.tag)}>")
        self.root = root

    @classmethod
    def from_string(cls, text: str) -> "DAXReader":
        try:
            return cls(ET.fromstring(text))
        except ET.ParseError as e:
            raise DAXParseError(f"Malformed DAX document: {e}") from e

    @classmethod
    def from_file(cls, path: Union[str, Path, IO[str]]) -> "DAXReader":
        try:
            return cls(ET.parse(path).getroot())
        except ET.ParseError as e:
            raise DAXParseError(f"Malformed DAX document: {e}", source=str(path)) from e
        except OSError as e:
            raise IOFailure(f"Failed reading DAX from {path}", cause=str(e)) from e

    @staticmethod
    def _read_profiles(elem: ET.Element, profiles: Profiles) -> None:
        for p in _children(elem, "profile"):
            profiles.set(_required(p, "namespace"), _required(p, "key"), p.text or "")

    def _read_file(self, elem: ET.Element) -> LogicalFile:
        f = LogicalFile(_required(elem, "name"), register=_as_bool(elem, "register", False))
        self._read_profiles(elem, f.profiles)
        for pfn in _children(elem, "pfn"):
            f.add_physical_file(_required(pfn, "url"), pfn.get("site", "local"))
        return f

    def _read_executable(self, elem: ET.Element) -> Executable:
        e = Executable(
            elem.get("namespace", ""),
            _required(elem, "name"),
            elem.get("version", ""),
            installed=_as_bool(elem, "installed", True),
        )
        try:
            if elem.get("arch"):
                e.set_architecture(elem.get("arch"))
            if elem.get("os"):
                e.set_os(elem.get("os"))
        except ValueError as exc:
            raise DAXParseError(f"Executable '{e.name}': {exc}", executable=e.name) from exc
        self._read_profiles(elem, e.profiles)
        for pfn in _children(elem, "pfn"):
            e.add_physical_file(_required(pfn, "url"), pfn.get("site", "local"))
        return e

    def _read_job(self, elem: ET.Element) -> Job:
        job = Job(
            _required(elem, "id"),
            elem.get("namespace", ""),
            _required(elem, "name"),
            elem.get("version", ""),
        )
        for arg in _children(elem, "argument"):
            if arg.text:
                job.add_argument(arg.text)
            for token in arg:
                if _local(token.tag) == "file":
                    job.add_argument(FileRef(_required(token, "name")))
                if token.tail:
                    job.add_argument(token.tail)
        self._read_profiles(elem, job.profiles)
        for use in _children(elem, "uses"):
            name = _required(use, "name")
            try:
                job.uses(
                    name,
                    _required(use, "link"),
                    transfer=_as_bool(use, "transfer", True),
                    optional=_as_bool(use, "optional", False),
                )
            except ValueError as exc:
                raise DAXParseError(f"Job '{job.id}' uses '{name}': {exc}", job=job.id) from exc
            self._read_profiles(use, job.usage(name).profiles)
        return job

    def read(self) -> Workflow:
        root = self.root
        wf = Workflow(_required(root, "name"), dependency_policy="explicit")
        try:
            for elem in _children(root, "file"):
                wf.add_file(self._read_file(elem))
            for elem in _children(root, "executable"):
                wf.add_executable(self._read_executable(elem))
            for elem in _children(root, "job"):
                wf.add_job(self._read_job(elem))
            for child in _children(root, "child"):
                ref = _required(child, "ref")
                for parent in _children(child, "parent"):
                    wf.add_dependency(_required(parent, "ref"), ref)
        except DAXParseError:
            raise
        except WorkflowError as e:
            raise DAXParseError(f"Inconsistent DAX document: {e.message}", cause_kind=e.kind, **e.details) from e
        except ValueError as e:
            raise DAXParseError(f"Invalid DAX document: {e}") from e
        log.debug("read DAX %s: %d job(s)", wf.name, len(wf))
        return wf


def read_dax(source: Union[str, Path, IO[str]]) -> Workflow:
    """Read a DAX from a path, an open stream, or a string holding the document."""
    if isinstance(source, str) and source.lstrip().startswith("<"):
        return DAXReader.from_string(source).read()
    return DAXReader.from_file(source).read()

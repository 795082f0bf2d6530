# registry.py
from __future__ import annotations

import logging
from typing import Dict, List

from .errors import DuplicateDeclaration, UnknownExecutable, UnknownFile
from .model import Executable, ExecutableKey, LogicalFile

log = logging.getLogger(__name__)


class EntityRegistry:
    """
    Sole owner of the logical files and executables a workflow refers to.

    Files are keyed by logical name, executables by (namespace, name, version).
    Jobs only keep these keys; lookups go through here.
    """

    def __init__(self) -> None:
        self._files: Dict[str, LogicalFile] = {}
        self._executables: Dict[ExecutableKey, Executable] = {}

    # ---- files ----

    def add_file(self, file: LogicalFile) -> LogicalFile:
        if file.name in self._files:
            raise DuplicateDeclaration(
                f"File '{file.name}' is already declared",
                file=file.name,
            )
        self._files[file.name] = file
        log.debug("declared file %s", file.name)
        return file

    def declare_file(self, name: str) -> LogicalFile:
        return self.add_file(LogicalFile(name))

    def add_physical_mapping(self, name: str, url: str, site: str = "local") -> LogicalFile:
        return self.get_file(name).add_physical_file(url, site)

    def get_file(self, name: str) -> LogicalFile:
        try:
            return self._files[name]
        except KeyError:
            raise UnknownFile(
                f"File '{name}' is not declared",
                file=name,
                known_files=sorted(self._files),
            ) from None

    def has_file(self, name: str) -> bool:
        return name in self._files

    @property
    def files(self) -> List[LogicalFile]:
        return list(self._files.values())

    # ---- executables ----

    def add_executable(self, executable: Executable) -> Executable:
        if executable.key in self._executables:
            raise DuplicateDeclaration(
                f"Executable '{format_key(executable.key)}' is already declared",
                executable=format_key(executable.key),
            )
        self._executables[executable.key] = executable
        log.debug("declared executable %s", format_key(executable.key))
        return executable

    def declare_executable(self, namespace: str, name: str, version: str) -> Executable:
        return self.add_executable(Executable(namespace, name, version))

    def get_executable(self, namespace: str, name: str, version: str) -> Executable:
        key = (namespace, name, version)
        try:
            return self._executables[key]
        except KeyError:
            raise UnknownExecutable(
                f"Executable '{format_key(key)}' is not declared",
                executable=format_key(key),
                known_executables=sorted(format_key(k) for k in self._executables),
            ) from None

    def has_executable(self, namespace: str, name: str, version: str) -> bool:
        return (namespace, name, version) in self._executables

    @property
    def executables(self) -> List[Executable]:
        return list(self._executables.values())


def format_key(key: ExecutableKey) -> str:
    namespace, name, version = key
    out = f"{namespace}::{name}" if namespace else name
    return f"{out}:{version}" if version else out

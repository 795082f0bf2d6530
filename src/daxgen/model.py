# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple, Union

from .errors import ConflictingUsage
from .profiles import Profiles


class _Choice(str, Enum):
    """String enum that also accepts upper-case member names."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None


class Link(_Choice):
    """Direction of a file's participation in a job."""
    INPUT = "input"
    OUTPUT = "output"


class Arch(_Choice):
    X86 = "x86"
    X86_64 = "x86_64"
    PPC = "ppc"
    PPC_64 = "ppc_64"
    IA64 = "ia64"
    SPARCV7 = "sparcv7"
    SPARCV9 = "sparcv9"
    AARCH64 = "aarch64"


class OS(_Choice):
    LINUX = "linux"
    SUNOS = "sunos"
    AIX = "aix"
    MACOSX = "macosx"
    WINDOWS = "windows"


ExecutableKey = Tuple[str, str, str]


@dataclass(frozen=True)
class PFN:
    """A physical mapping: where a logical file or executable lives."""
    url: str
    site: str = "local"


@dataclass
class LogicalFile:
    """A named data artifact, independent of where it is stored."""
    name: str
    pfns: List[PFN] = field(default_factory=list)
    register: bool = False
    profiles: Profiles = field(default_factory=Profiles)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("logical file name must be non-empty")

    def add_physical_file(self, url: str, site: str = "local") -> "LogicalFile":
        pfn = PFN(url, site)
        if pfn not in self.pfns:
            self.pfns.append(pfn)
        return self

    def set_register(self, register: bool = True) -> "LogicalFile":
        self.register = bool(register)
        return self

    def add_profile(self, namespace: str, key: str, value) -> "LogicalFile":
        self.profiles.set(namespace, key, value)
        return self


@dataclass
class Executable:
    """
    A transformation binary, identified by (namespace, name, version).

    installed=True means it is already present on the target site;
    False asks the planner to stage it from one of its pfns.
    """
    namespace: str
    name: str
    version: str
    arch: Arch = Arch.X86_64
    os: OS = OS.LINUX
    installed: bool = True
    pfns: List[PFN] = field(default_factory=list)
    profiles: Profiles = field(default_factory=Profiles)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("executable name must be non-empty")
        self.arch = Arch(self.arch)
        self.os = OS(self.os)

    @property
    def key(self) -> ExecutableKey:
        return (self.namespace, self.name, self.version)

    def set_architecture(self, arch: Union[Arch, str]) -> "Executable":
        self.arch = Arch(arch)
        return self

    def set_os(self, os: Union[OS, str]) -> "Executable":
        self.os = OS(os)
        return self

    def set_installed(self, installed: bool = True) -> "Executable":
        self.installed = bool(installed)
        return self

    def add_physical_file(self, url: str, site: str = "local") -> "Executable":
        pfn = PFN(url, site)
        if pfn not in self.pfns:
            self.pfns.append(pfn)
        return self

    def add_profile(self, namespace: str, key: str, value) -> "Executable":
        self.profiles.set(namespace, key, value)
        return self


@dataclass(frozen=True)
class FileRef:
    """Argument token rendered as the logical file name."""
    name: str


Argument = Union[str, FileRef]


@dataclass
class Use:
    """A (file, link) usage record on a job. Holds the file name, not the file."""
    file: str
    link: Link
    transfer: bool = True
    optional: bool = False
    profiles: Profiles = field(default_factory=Profiles)

    def add_profile(self, namespace: str, key: str, value) -> "Use":
        self.profiles.set(namespace, key, value)
        return self


def _file_name(file: Union[LogicalFile, FileRef, str]) -> str:
    if isinstance(file, (LogicalFile, FileRef)):
        return file.name
    if isinstance(file, str) and file:
        return file
    raise TypeError(f"expected a LogicalFile or file name, got {file!r}")


@dataclass
class Job:
    """
    A job: an invocation of one executable with arguments and file usages.

    The executable is referenced by its (namespace, name, version) key and
    resolved against the workflow registry during validation.
    """
    id: str
    namespace: str
    name: str
    version: str
    arguments: List[Argument] = field(default_factory=list)
    usages: List[Use] = field(default_factory=list)
    profiles: Profiles = field(default_factory=Profiles)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError("job id must be a non-empty string")

    @classmethod
    def of(cls, job_id: str, executable: Executable) -> "Job":
        return cls(job_id, executable.namespace, executable.name, executable.version)

    @property
    def executable_key(self) -> ExecutableKey:
        return (self.namespace, self.name, self.version)

    def add_argument(self, *tokens: Union[str, LogicalFile, FileRef]) -> "Job":
        for token in tokens:
            if isinstance(token, (LogicalFile, FileRef)):
                self.arguments.append(FileRef(token.name))
            elif isinstance(token, str):
                # "" renders nothing and would not survive a read back
                if token:
                    self.arguments.append(token)
            else:
                raise TypeError(f"argument must be str or LogicalFile, got {token!r}")
        return self

    def uses(
        self,
        file: Union[LogicalFile, FileRef, str],
        link: Union[Link, str],
        *,
        transfer: bool = True,
        optional: bool = False,
    ) -> "Job":
        name = _file_name(file)
        link = Link(link)
        for use in self.usages:
            if use.file != name:
                continue
            if use.link != link:
                raise ConflictingUsage(
                    f"Job '{self.id}' uses '{name}' as both {use.link.value} and {link.value}",
                    job=self.id,
                    file=name,
                )
            use.transfer = transfer
            use.optional = optional
            return self
        self.usages.append(Use(name, link, transfer=transfer, optional=optional))
        return self

    def usage(self, file: Union[LogicalFile, FileRef, str]) -> Use:
        name = _file_name(file)
        for use in self.usages:
            if use.file == name:
                return use
        raise KeyError(name)

    def add_profile(self, namespace: str, key: str, value) -> "Job":
        self.profiles.set(namespace, key, value)
        return self

    def inputs(self) -> List[str]:
        return [u.file for u in self.usages if u.link is Link.INPUT]

    def outputs(self) -> List[str]:
        return [u.file for u in self.usages if u.link is Link.OUTPUT]

    def referenced_files(self) -> List[str]:
        """Every file name the job mentions, usage first then argument order."""
        seen: List[str] = []
        for name in [u.file for u in self.usages] + [a.name for a in self.arguments if isinstance(a, FileRef)]:
            if name not in seen:
                seen.append(name)
        return seen

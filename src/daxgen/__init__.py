from .dsl import lfn, exe, job, wf
from .model import Arch, OS, Link, PFN, LogicalFile, Executable, Job, FileRef, Use
from .profiles import Namespace, Profile, Profiles
from .workflow import Workflow, Dependency
from .validator import Validator, validate, topological_order, topological_levels
from .dax import DAXWriter, DAXReader, write_dax, read_dax
from .errors import (
    WorkflowError,
    DuplicateDeclaration,
    UnknownEntity,
    UnknownFile,
    UnknownExecutable,
    UnknownJob,
    DuplicateJobId,
    DuplicateEdge,
    ConflictingProducer,
    ConflictingUsage,
    CyclicGraph,
    IOFailure,
    InvalidCharacter,
    DAXParseError,
    ConfigError,
)

# DAX generator scripts traditionally call the workflow an ADAG and files "File"
ADAG = Workflow
File = LogicalFile

__all__ = [
    "lfn", "exe", "job", "wf",
    "Arch", "OS", "Link", "PFN", "LogicalFile", "File", "Executable", "Job", "FileRef", "Use",
    "Namespace", "Profile", "Profiles",
    "Workflow", "ADAG", "Dependency",
    "Validator", "validate", "topological_order", "topological_levels",
    "DAXWriter", "DAXReader", "write_dax", "read_dax",
    "WorkflowError", "DuplicateDeclaration", "UnknownEntity", "UnknownFile", "UnknownExecutable",
    "UnknownJob", "DuplicateJobId", "DuplicateEdge", "ConflictingProducer", "ConflictingUsage",
    "CyclicGraph", "IOFailure", "InvalidCharacter", "DAXParseError", "ConfigError",
]

# errors.py
from __future__ import annotations

from typing import Any, Dict, List, Optional


class WorkflowError(Exception):
    """
    Structured workflow error with enough context for:
      - clean CLI output
      - locating the offending job / file / executable
      - debugging without full tracebacks
    """

    kind = "WorkflowError"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class DuplicateDeclaration(WorkflowError):
    kind = "DuplicateDeclaration"


class UnknownEntity(WorkflowError):
    kind = "UnknownEntity"


class UnknownFile(UnknownEntity):
    kind = "UnknownFile"


class UnknownExecutable(UnknownEntity):
    kind = "UnknownExecutable"


class UnknownJob(UnknownEntity):
    kind = "UnknownJob"


class DuplicateJobId(WorkflowError):
    kind = "DuplicateJobId"


class DuplicateEdge(WorkflowError):
    kind = "DuplicateEdge"


class ConflictingProducer(WorkflowError):
    kind = "ConflictingProducer"


class ConflictingUsage(WorkflowError):
    kind = "ConflictingUsage"


class CyclicGraph(WorkflowError):
    """The job graph is not a DAG. `cycle` holds one offending path."""

    kind = "CyclicGraph"

    def __init__(self, message: str, cycle: Optional[List[str]] = None, **details: Any):
        self.cycle: List[str] = list(cycle or [])
        super().__init__(message, cycle=" -> ".join(self.cycle), **details)


class IOFailure(WorkflowError):
    kind = "IOFailure"


class InvalidCharacter(WorkflowError):
    """A value holds a character XML 1.0 cannot represent."""

    kind = "InvalidCharacter"


class DAXParseError(WorkflowError):
    kind = "DAXParseError"


class ConfigError(WorkflowError):
    kind = "ConfigError"

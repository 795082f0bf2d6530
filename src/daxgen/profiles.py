# profiles.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

log = logging.getLogger(__name__)


class Namespace:
    """Profile namespaces the planner understands. Not enforced."""
    PEGASUS = "pegasus"
    CONDOR = "condor"
    DAGMAN = "dagman"
    ENV = "env"
    GLOBUS = "globus"
    HINTS = "hints"
    SELECTOR = "selector"
    STAT = "stat"


@dataclass(frozen=True)
class Profile:
    """A single namespaced key/value hint."""
    namespace: str
    key: str
    value: str


class Profiles:
    """
    Ordered metadata bag keyed by (namespace, key).

    Setting an existing (namespace, key) replaces the value but keeps its
    position, so serialization order only depends on first insertion.
    """

    def __init__(self) -> None:
        self._entries: Dict[Tuple[str, str], str] = {}

    def set(self, namespace: str, key: str, value: Any) -> "Profiles":
        if not namespace or not key:
            raise ValueError("profile namespace and key must be non-empty")
        self._entries[(namespace, key)] = str(value)
        return self

    def get(self, namespace: str, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get((namespace, key), default)

    def remove(self, namespace: str, key: str) -> None:
        self._entries.pop((namespace, key), None)

    def by_namespace(self, namespace: str) -> Dict[str, str]:
        return {k: v for (ns, k), v in self._entries.items() if ns == namespace}

    def __iter__(self) -> Iterator[Profile]:
        for (ns, key), value in self._entries.items():
            yield Profile(ns, key, value)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: object) -> bool:
        return item in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Profiles):
            return NotImplemented
        # insertion order is part of equality: it drives output order
        return list(self._entries.items()) == list(other._entries.items())

    def __repr__(self) -> str:
        return f"Profiles({list(self)!r})"


class ProfileStore:
    """Attach profiles to any entity that carries a `profiles` bag."""

    def set_profile(self, owner: Any, namespace: str, key: str, value: Any) -> Any:
        profiles = getattr(owner, "profiles", None)
        if not isinstance(profiles, Profiles):
            raise TypeError(f"{type(owner).__name__} cannot carry profiles")
        profiles.set(namespace, key, value)
        log.debug("profile %s.%s=%s set on %r", namespace, key, value, owner)
        return owner

    def profiles_of(self, owner: Any) -> List[Profile]:
        return list(getattr(owner, "profiles", None) or [])

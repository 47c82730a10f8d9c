"""Routing intents: which host and path a route serves."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PathType(Enum):
    """Kinds of path match an ingress rule can request."""

    EXACT = "Exact"
    PREFIX = "Prefix"
    IMPLEMENTATION_SPECIFIC = "ImplementationSpecific"
    REGEX = "Regex"


@dataclass(frozen=True)
class HostAndPath:
    """A single (host, path, path type) routing intent.

    Used as a dictionary key, so it is frozen and compares structurally.
    ``path_type`` is kept as a plain string: kinds this package does not know
    about are carried through and matched exactly.
    """

    host: str
    path: str = ""
    path_type: str = PathType.PREFIX.value

    def __post_init__(self) -> None:
        if isinstance(self.path_type, PathType):
            object.__setattr__(self, "path_type", self.path_type.value)

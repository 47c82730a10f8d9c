"""Backend group lookup contract.

A lookup has three outcomes: the group was found, it does not exist yet,
or the lookup itself failed. BackendGroupLookup carries exactly one of them,
so "not found" and "lookup error" can never be reported together.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class BackendGroup:
    id: str
    name: str
    folder_id: str = ""


class LookupStatus(Enum):
    FOUND = "found"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class BackendGroupLookup:
    """Outcome of a single backend group lookup."""

    status: LookupStatus
    backend_group: BackendGroup | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.status is LookupStatus.FOUND and self.backend_group is None:
            raise ValueError("found lookup requires a backend group")
        if self.status is LookupStatus.ERROR and self.error is None:
            raise ValueError("failed lookup requires an error")

    @classmethod
    def found(cls, backend_group: BackendGroup) -> BackendGroupLookup:
        return cls(LookupStatus.FOUND, backend_group=backend_group)

    @classmethod
    def absent(cls) -> BackendGroupLookup:
        return cls(LookupStatus.ABSENT)

    @classmethod
    def failed(cls, error: BaseException) -> BackendGroupLookup:
        return cls(LookupStatus.ERROR, error=error)


@runtime_checkable
class BackendGroupFinder(Protocol):
    """Resolves backend group names to cloud backend groups."""

    def find_backend_group(self, name: str) -> BackendGroupLookup: ...


class StaticBackendGroupFinder:
    """Finder over a fixed name to backend group table.

    Values may be BackendGroup instances or bare backend group IDs.
    """

    def __init__(self, groups: Mapping[str, BackendGroup | str] | None = None) -> None:
        self._groups: dict[str, BackendGroup] = {}
        for name, group in (groups or {}).items():
            self.add(name, group)

    def add(self, name: str, group: BackendGroup | str) -> None:
        if isinstance(group, str):
            group = BackendGroup(id=group, name=name)
        self._groups[name] = group

    def find_backend_group(self, name: str) -> BackendGroupLookup:
        group = self._groups.get(name)
        if group is None:
            return BackendGroupLookup.absent()
        return BackendGroupLookup.found(group)

    def __len__(self) -> int:
        return len(self._groups)

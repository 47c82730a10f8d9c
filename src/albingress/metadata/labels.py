"""Default labels attached to cloud resources."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LabelsProvider(Protocol):
    def default(self) -> dict[str, str]: ...


class Labels:
    """Labels marking resources as managed by a given cluster's controller."""

    def __init__(self, cluster_id: str = "", managed_by: str = "albingress") -> None:
        self.cluster_id = cluster_id
        self.managed_by = managed_by

    def default(self) -> dict[str, str]:
        """Return a fresh label dictionary; callers may mutate it."""
        labels = {"managed-by": self.managed_by}
        if self.cluster_id:
            labels["cluster-id"] = self.cluster_id
        return labels

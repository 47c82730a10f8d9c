"""Virtual host and route options, and how they combine.

Several ingress rules may target the same host, each bringing its own
virtual host options. They are merged key by key; a key set to different
values on both sides is an OptionConflictError, never an overwrite.

Example:
    first = VirtualHostOptions(ModifyResponseOptions(append={"X": "1"}))
    second = VirtualHostOptions(ModifyResponseOptions(append={"Y": "2"}))
    merged = merge_virtual_host_options(first, second)
    merged.modify_response.append  # {"X": "1", "Y": "2"}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import TypeVar

from albingress.builders.models import HeaderModification, RouteOptionsSpec
from albingress.errors import OptionConflictError

V = TypeVar("V")


class BackendType(Enum):
    """Protocol family spoken to the backends of forwarded routes."""

    HTTP = "http"
    GRPC = "grpc"


@dataclass
class ModifyResponseOptions:
    """Response header modifications, each keyed by header name."""

    remove: dict[str, bool] = field(default_factory=dict)
    rename: dict[str, str] = field(default_factory=dict)
    replace: dict[str, str] = field(default_factory=dict)
    append: dict[str, str] = field(default_factory=dict)

    def clone(self) -> ModifyResponseOptions:
        return ModifyResponseOptions(
            remove=dict(self.remove),
            rename=dict(self.rename),
            replace=dict(self.replace),
            append=dict(self.append),
        )

    def is_empty(self) -> bool:
        return not (self.remove or self.rename or self.replace or self.append)


@dataclass
class VirtualHostOptions:
    modify_response: ModifyResponseOptions = field(default_factory=ModifyResponseOptions)
    security_profile_id: str = ""

    def clone(self) -> VirtualHostOptions:
        return VirtualHostOptions(
            modify_response=self.modify_response.clone(),
            security_profile_id=self.security_profile_id,
        )


@dataclass
class RouteOptions:
    """Per-call options applied to every route added until reconfigured."""

    timeout: timedelta | None = None
    idle_timeout: timedelta | None = None
    prefix_rewrite: str = ""
    upgrade_types: list[str] = field(default_factory=list)
    backend_type: BackendType = BackendType.HTTP
    use_regex: bool = False
    allowed_methods: list[str] = field(default_factory=list)
    """Allowed HTTP methods. Empty means all methods."""


def merge_maps(option: str, first: Mapping[str, V], second: Mapping[str, V]) -> dict[str, V]:
    """Union two maps, refusing keys that carry different values.

    Keys of ``first`` keep their position; new keys of ``second`` follow.

    Raises:
        OptionConflictError: If a key is present in both maps with different values.
    """
    merged = dict(first)
    for key, value in second.items():
        if key in merged and merged[key] != value:
            raise OptionConflictError(option, merged[key], value, key=key)
        merged.setdefault(key, value)
    return merged


def merge_virtual_host_options(
    first: VirtualHostOptions, second: VirtualHostOptions
) -> VirtualHostOptions:
    """Merge two option sets without mutating either.

    Raises:
        OptionConflictError: If both sides set different security profiles, or
            any response modification key disagrees.
    """
    profile1 = first.security_profile_id
    profile2 = second.security_profile_id
    if profile1 and profile2 and profile1 != profile2:
        raise OptionConflictError("security profiles", profile1, profile2)

    mr1 = first.modify_response
    mr2 = second.modify_response
    return VirtualHostOptions(
        security_profile_id=profile1 or profile2,
        modify_response=ModifyResponseOptions(
            append=merge_maps("modify response append", mr1.append, mr2.append),
            remove=merge_maps("modify response remove", mr1.remove, mr2.remove),
            rename=merge_maps("modify response rename", mr1.rename, mr2.rename),
            replace=merge_maps("modify response replace", mr1.replace, mr2.replace),
        ),
    )


def build_header_modifications(
    modify_response: ModifyResponseOptions,
) -> list[HeaderModification]:
    """Translate modifications into instructions: remove, replace, rename, append."""
    modifications = [
        HeaderModification(name=name, remove=remove)
        for name, remove in modify_response.remove.items()
    ]
    modifications.extend(
        HeaderModification(name=name, replace=value)
        for name, value in modify_response.replace.items()
    )
    modifications.extend(
        HeaderModification(name=name, rename=value)
        for name, value in modify_response.rename.items()
    )
    modifications.extend(
        HeaderModification(name=name, append=value)
        for name, value in modify_response.append.items()
    )
    return modifications


def build_route_options(
    modify_response: ModifyResponseOptions, security_profile_id: str
) -> RouteOptionsSpec | None:
    """Route options for a virtual host, or None when there is nothing to set."""
    modifications = build_header_modifications(modify_response)
    if not modifications and not security_profile_id:
        return None
    return RouteOptionsSpec(
        modify_response_headers=tuple(modifications),
        security_profile_id=security_profile_id,
    )

"""Deterministic names for cloud resources created from ingresses.

Cloud resource names are limited to 63 characters of ``[a-z0-9-]`` and must
start with a letter. Readable parts (tag, host, path) are sanitized into that
alphabet; every name that is built from free-form input also carries a short
digest of the exact input, so inputs that sanitize to the same text still
get different names. Long names keep the digest and lose readable text.

Example:
    names = Names(cluster_id="c1")
    names.route_for_path("web", "a.com", "/x", "Exact")
    # 'ingress-web-route-a-com-x-' followed by an 8 character digest
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

MAX_NAME_LENGTH = 63
DIGEST_LENGTH = 8

_INVALID_CHARS = re.compile(r"[^a-z0-9-]+")
_DASHES = re.compile(r"-{2,}")


@dataclass(frozen=True)
class NamespacedName:
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@runtime_checkable
class Namer(Protocol):
    """Naming policy for routers, virtual hosts, routes and backend groups."""

    def virtual_host_for_id(self, tag: str, vh_id: int) -> str: ...
    def router(self, tag: str) -> str: ...
    def router_tls(self, tag: str) -> str: ...
    def route_for_path(self, tag: str, host: str, path: str, path_type: str) -> str: ...
    def route_for_path2(
        self, tag: str, host: str, path: str, path_type: str, index: int
    ) -> str: ...
    def new_backend_group(self, name: NamespacedName) -> str: ...
    def backend_group_for_cr(self, namespace: str, resource_name: str) -> str: ...


def sanitize(value: str) -> str:
    """Lower-case ``value`` and squeeze anything outside ``[a-z0-9-]`` into dashes."""
    value = _INVALID_CHARS.sub("-", value.lower())
    return _DASHES.sub("-", value).strip("-")


def digest(*parts: str) -> str:
    """Short stable digest of the exact, unsanitized parts."""
    raw = "\x00".join(parts).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()[:DIGEST_LENGTH]


class Names:
    """Default naming policy.

    Args:
        cluster_id: Identifier of the Kubernetes cluster; included in
            backend group names, which are shared across a folder.
        prefix: Leading word of every name. Must start with a letter.
    """

    def __init__(self, cluster_id: str = "", prefix: str = "ingress") -> None:
        if not prefix or not prefix[0].isalpha():
            raise ValueError(f"Name prefix must start with a letter: {prefix!r}")
        self.cluster_id = cluster_id
        self.prefix = sanitize(prefix)

    def _join(self, *parts: str) -> str:
        return "-".join(p for p in (sanitize(part) for part in parts) if p)

    def _fit(self, readable: str, suffix: str = "") -> str:
        """Cut ``readable`` so that readable plus suffix fits the length limit."""
        tail = f"-{suffix}" if suffix else ""
        room = MAX_NAME_LENGTH - len(tail)
        return readable[:room].rstrip("-") + tail

    def _hashed(self, readable: str, *key: str) -> str:
        return self._fit(readable, digest(*key))

    def virtual_host_for_id(self, tag: str, vh_id: int) -> str:
        return self._hashed(self._join(self.prefix, tag, "vh", str(vh_id)), tag, str(vh_id))

    def router(self, tag: str) -> str:
        return self._hashed(self._join(self.prefix, tag, "router"), tag)

    def router_tls(self, tag: str) -> str:
        return self._hashed(self._join(self.prefix, tag, "router-tls"), tag, "tls")

    def route_for_path(self, tag: str, host: str, path: str, path_type: str) -> str:
        return self._hashed(
            self._join(self.prefix, tag, "route", host, path),
            tag,
            host,
            path,
            path_type,
        )

    def route_for_path2(
        self, tag: str, host: str, path: str, path_type: str, index: int
    ) -> str:
        return self._hashed(
            self._join(self.prefix, tag, "route", host, path),
            tag,
            host,
            path,
            path_type,
            str(index),
        )

    def new_backend_group(self, name: NamespacedName) -> str:
        return self._hashed(
            self._join(self.prefix, "bg", name.namespace, name.name),
            self.cluster_id,
            name.namespace,
            name.name,
        )

    def backend_group_for_cr(self, namespace: str, resource_name: str) -> str:
        return self._hashed(
            self._join(self.prefix, "bg-cr", namespace, resource_name),
            self.cluster_id,
            "cr",
            namespace,
            resource_name,
        )

"""Router configuration objects handed to the load balancer API client.

The classes mirror the application load balancer API messages. Each one
renders itself with ``to_dict()`` into the JSON mapping the API expects:
camelCase keys, unset sub-messages and empty scalars omitted, durations as
``"<seconds>s"`` strings.

Example:
    route = Route(
        name="default-route",
        http=HttpRoute(
            match=HttpRouteMatch(path=StringMatch(prefix_match="/")),
            action=HttpRouteAction(backend_group_id="bg-1"),
        ),
    )
    route.to_dict()
    # {"name": "default-route", "http": {"match": {"path": {"prefixMatch": "/"}},
    #  "route": {"backendGroupId": "bg-1"}}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any


def format_duration(value: timedelta) -> str:
    """Render a duration the way the API's JSON mapping expects it."""
    seconds = value.total_seconds()
    if seconds == int(seconds):
        return f"{int(seconds)}s"
    return f"{seconds:.9f}".rstrip("0") + "s"


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, "", [], {}, False, 0)}


@dataclass(frozen=True)
class StringMatch:
    """Exactly one of exact, prefix or regex match."""

    exact_match: str | None = None
    prefix_match: str | None = None
    regex_match: str | None = None

    def __post_init__(self) -> None:
        set_fields = [
            value
            for value in (self.exact_match, self.prefix_match, self.regex_match)
            if value is not None
        ]
        if len(set_fields) != 1:
            raise ValueError("StringMatch requires exactly one of exact, prefix or regex match")

    def to_dict(self) -> dict[str, Any]:
        if self.exact_match is not None:
            return {"exactMatch": self.exact_match}
        if self.prefix_match is not None:
            return {"prefixMatch": self.prefix_match}
        return {"regexMatch": self.regex_match}


@dataclass(frozen=True)
class HttpRouteMatch:
    path: StringMatch | None = None
    http_methods: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "path": self.path.to_dict() if self.path else None,
                "httpMethod": list(self.http_methods),
            }
        )


@dataclass(frozen=True)
class GrpcRouteMatch:
    fqmn: StringMatch | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact({"fqmn": self.fqmn.to_dict() if self.fqmn else None})


@dataclass(frozen=True)
class HttpRouteAction:
    """Forward matched HTTP requests to a backend group."""

    backend_group_id: str
    timeout: timedelta | None = None
    idle_timeout: timedelta | None = None
    prefix_rewrite: str = ""
    upgrade_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "backendGroupId": self.backend_group_id,
                "timeout": format_duration(self.timeout) if self.timeout else None,
                "idleTimeout": format_duration(self.idle_timeout) if self.idle_timeout else None,
                "prefixRewrite": self.prefix_rewrite,
                "upgradeTypes": list(self.upgrade_types),
            }
        )


@dataclass(frozen=True)
class GrpcRouteAction:
    """Forward matched gRPC calls to a backend group."""

    backend_group_id: str
    max_timeout: timedelta | None = None
    idle_timeout: timedelta | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "backendGroupId": self.backend_group_id,
                "maxTimeout": format_duration(self.max_timeout) if self.max_timeout else None,
                "idleTimeout": format_duration(self.idle_timeout) if self.idle_timeout else None,
            }
        )


class RedirectResponseCode(Enum):
    MOVED_PERMANENTLY = "MOVED_PERMANENTLY"
    FOUND = "FOUND"
    SEE_OTHER = "SEE_OTHER"
    TEMPORARY_REDIRECT = "TEMPORARY_REDIRECT"
    PERMANENT_REDIRECT = "PERMANENT_REDIRECT"


@dataclass(frozen=True)
class RedirectAction:
    replace_scheme: str = ""
    replace_host: str = ""
    replace_port: int = 0
    replace_path: str = ""
    replace_prefix: str = ""
    remove_query: bool = False
    response_code: RedirectResponseCode = RedirectResponseCode.MOVED_PERMANENTLY

    def __post_init__(self) -> None:
        if self.replace_path and self.replace_prefix:
            raise ValueError("replace_path and replace_prefix are mutually exclusive")

    def to_dict(self) -> dict[str, Any]:
        data = _compact(
            {
                "replaceScheme": self.replace_scheme,
                "replaceHost": self.replace_host,
                "replacePort": self.replace_port,
                "replacePath": self.replace_path,
                "replacePrefix": self.replace_prefix,
                "removeQuery": self.remove_query,
            }
        )
        data["responseCode"] = self.response_code.value
        return data


@dataclass(frozen=True)
class DirectResponseAction:
    status: int
    body: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status}
        if self.body:
            data["body"] = {"text": self.body}
        return data


HttpAction = HttpRouteAction | RedirectAction | DirectResponseAction

_HTTP_ACTION_KEYS: dict[type, str] = {
    HttpRouteAction: "route",
    RedirectAction: "redirect",
    DirectResponseAction: "directResponse",
}


@dataclass(frozen=True)
class HttpRoute:
    match: HttpRouteMatch
    action: HttpAction

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        match = self.match.to_dict()
        if match:
            data["match"] = match
        data[_HTTP_ACTION_KEYS[type(self.action)]] = self.action.to_dict()
        return data


@dataclass(frozen=True)
class GrpcRoute:
    match: GrpcRouteMatch
    action: GrpcRouteAction

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        match = self.match.to_dict()
        if match:
            data["match"] = match
        data["route"] = self.action.to_dict()
        return data


@dataclass(frozen=True)
class Route:
    """One match-to-action binding; exactly one of ``http`` or ``grpc``."""

    name: str = ""
    http: HttpRoute | None = None
    grpc: GrpcRoute | None = None

    def __post_init__(self) -> None:
        if (self.http is None) == (self.grpc is None):
            raise ValueError("Route requires exactly one of http or grpc")

    @property
    def is_grpc(self) -> bool:
        return self.grpc is not None

    def to_dict(self) -> dict[str, Any]:
        if self.grpc is not None:
            return {"name": self.name, "grpc": self.grpc.to_dict()}
        assert self.http is not None
        return {"name": self.name, "http": self.http.to_dict()}


@dataclass(frozen=True)
class HeaderModification:
    """A single response header instruction.

    Exactly one operation is set; ``remove`` uses ``None`` for "unset".
    """

    name: str
    append: str | None = None
    replace: str | None = None
    remove: bool | None = None
    rename: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        for key in ("append", "replace", "remove", "rename"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class RouteOptionsSpec:
    modify_response_headers: tuple[HeaderModification, ...] = ()
    security_profile_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "modifyResponseHeaders": [m.to_dict() for m in self.modify_response_headers],
                "securityProfileId": self.security_profile_id,
            }
        )


@dataclass
class VirtualHostSpec:
    """A virtual host as emitted in the router configuration."""

    name: str
    authority: list[str]
    routes: list[Route] = field(default_factory=list)
    route_options: RouteOptionsSpec | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "authority": list(self.authority),
            "routes": [route.to_dict() for route in self.routes],
        }
        if self.route_options is not None:
            data["routeOptions"] = self.route_options.to_dict()
        return data


@dataclass
class HttpRouter:
    name: str
    description: str = ""
    folder_id: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    virtual_hosts: list[VirtualHostSpec] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.folder_id:
            data["folderId"] = self.folder_id
        data["description"] = self.description
        data["labels"] = dict(self.labels)
        data["virtualHosts"] = [vh.to_dict() for vh in self.virtual_hosts]
        return data


@dataclass
class HTTPRouterData:
    """Result of a build session."""

    router: HttpRouter

    def to_dict(self) -> dict[str, Any]:
        return {"router": self.router.to_dict()}

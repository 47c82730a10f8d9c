"""HTTP router building from ingress routing intents.

Features:
- Virtual hosts grouped per host, emitted in first-seen order
- Conflict-checked merging of virtual host options
- Exact, prefix and regex path matches
- HTTP and gRPC forwarding, redirects and direct responses
- Backward compatible route names with disambiguated duplicates

Usage:
    from albingress.builders import (
        HostAndPath,
        HTTPRouterBuilder,
        PathType,
        RouteOptions,
        StaticBackendGroupFinder,
        VirtualHostOptions,
    )
    from albingress.metadata import Labels, Names, NamespacedName

    names = Names(cluster_id="c1")
    finder = StaticBackendGroupFinder(
        {names.new_backend_group(NamespacedName("default", "web")): "bg-web"}
    )
    builder = HTTPRouterBuilder("main", "folder-1", names, Labels("c1"), finder)
    builder.configure(VirtualHostOptions(), RouteOptions(), namespace="default")
    builder.add_route(HostAndPath("example.com", "/", PathType.PREFIX), "web")
    router = builder.build().router
"""

from albingress.builders.finder import (
    BackendGroup,
    BackendGroupFinder,
    BackendGroupLookup,
    LookupStatus,
    StaticBackendGroupFinder,
)
from albingress.builders.hosts import HostAndPath, PathType
from albingress.builders.models import (
    DirectResponseAction,
    GrpcRoute,
    GrpcRouteAction,
    GrpcRouteMatch,
    HeaderModification,
    HttpRoute,
    HttpRouteAction,
    HttpRouteMatch,
    HttpRouter,
    HTTPRouterData,
    RedirectAction,
    RedirectResponseCode,
    Route,
    RouteOptionsSpec,
    StringMatch,
    VirtualHostSpec,
)
from albingress.builders.options import (
    BackendType,
    ModifyResponseOptions,
    RouteOptions,
    VirtualHostOptions,
    build_header_modifications,
    build_route_options,
    merge_maps,
    merge_virtual_host_options,
)
from albingress.builders.router import HTTPRouterBuilder, SequentialIDs
from albingress.builders.routes import (
    grpc_route,
    http_route,
    http_route_for_action,
    match_for_path,
    redirect_to_https_action,
)
from albingress.builders.virtualhosts import VirtualHost, VirtualHostTable

__all__ = [
    # Builder
    "HTTPRouterBuilder",
    "SequentialIDs",
    "VirtualHost",
    "VirtualHostTable",
    # Intents and options
    "HostAndPath",
    "PathType",
    "BackendType",
    "ModifyResponseOptions",
    "RouteOptions",
    "VirtualHostOptions",
    "merge_maps",
    "merge_virtual_host_options",
    "build_header_modifications",
    "build_route_options",
    # Constructors
    "match_for_path",
    "http_route",
    "http_route_for_action",
    "grpc_route",
    "redirect_to_https_action",
    # Backend groups
    "BackendGroup",
    "BackendGroupFinder",
    "BackendGroupLookup",
    "LookupStatus",
    "StaticBackendGroupFinder",
    # Output
    "DirectResponseAction",
    "GrpcRoute",
    "GrpcRouteAction",
    "GrpcRouteMatch",
    "HeaderModification",
    "HttpRoute",
    "HttpRouteAction",
    "HttpRouteMatch",
    "HttpRouter",
    "HTTPRouterData",
    "RedirectAction",
    "RedirectResponseCode",
    "Route",
    "RouteOptionsSpec",
    "StringMatch",
    "VirtualHostSpec",
]

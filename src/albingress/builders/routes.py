"""Match and action constructors.

Pure functions turning a routing intent plus route options into an unnamed
Route. Names are assigned when the route is appended to its virtual host.
"""

from __future__ import annotations

from albingress.builders.hosts import HostAndPath, PathType
from albingress.builders.models import (
    GrpcRoute,
    GrpcRouteAction,
    GrpcRouteMatch,
    HttpAction,
    HttpRoute,
    HttpRouteAction,
    HttpRouteMatch,
    RedirectAction,
    RedirectResponseCode,
    Route,
    StringMatch,
)
from albingress.builders.options import RouteOptions


def match_for_path(hp: HostAndPath) -> StringMatch | None:
    """Build the path matcher for an intent.

    An empty path matches everything and yields no matcher. Unknown path
    types fall back to an exact match.
    """
    if not hp.path:
        return None

    if hp.path_type == PathType.REGEX.value:
        return StringMatch(regex_match=hp.path)
    if hp.path_type == PathType.PREFIX.value:
        return StringMatch(prefix_match=hp.path)
    return StringMatch(exact_match=hp.path)


def http_route_for_action(
    hp: HostAndPath, action: HttpAction, methods: list[str] | tuple[str, ...] = ()
) -> Route:
    return Route(
        http=HttpRoute(
            match=HttpRouteMatch(path=match_for_path(hp), http_methods=tuple(methods)),
            action=action,
        )
    )


def http_route(hp: HostAndPath, opts: RouteOptions, backend_group_id: str) -> Route:
    action = HttpRouteAction(
        backend_group_id=backend_group_id,
        timeout=opts.timeout,
        idle_timeout=opts.idle_timeout,
        prefix_rewrite=opts.prefix_rewrite,
        upgrade_types=tuple(opts.upgrade_types),
    )
    return http_route_for_action(hp, action, opts.allowed_methods)


def grpc_route(hp: HostAndPath, opts: RouteOptions, backend_group_id: str) -> Route:
    """gRPC routes match on the fully qualified method name; the path is reused for it."""
    action = GrpcRouteAction(
        backend_group_id=backend_group_id,
        max_timeout=opts.timeout,
        idle_timeout=opts.idle_timeout,
    )
    return Route(grpc=GrpcRoute(match=GrpcRouteMatch(fqmn=match_for_path(hp)), action=action))


def redirect_to_https_action() -> RedirectAction:
    return RedirectAction(
        replace_scheme="https",
        replace_port=443,
        remove_query=False,
        response_code=RedirectResponseCode.MOVED_PERMANENTLY,
    )

"""HTTP router builder.

Collects routes produced from ingress rules and emits one router
configuration with virtual hosts grouped per host.

A builder lives for a single build session: create it, ``configure`` the
options of the ingress being processed, add its routes, repeat for the next
ingress, then ``build``. It owns no external resources and is not safe for
concurrent use.

Example:
    builder = HTTPRouterBuilder(
        tag="web",
        folder_id="folder-1",
        names=Names(cluster_id="c1"),
        labels=Labels(cluster_id="c1"),
        backend_group_finder=StaticBackendGroupFinder({...}),
    )
    builder.configure(VirtualHostOptions(), RouteOptions(), namespace="default")
    builder.add_route(HostAndPath("a.com", "/", "Prefix"), "frontend")
    builder.add_redirect_to_https(HostAndPath("b.com"))
    data = builder.build()
"""

from __future__ import annotations

import itertools

import structlog

from albingress.builders.finder import BackendGroup, BackendGroupFinder, LookupStatus
from albingress.builders.hosts import HostAndPath
from albingress.builders.models import (
    DirectResponseAction,
    HttpRouter,
    HTTPRouterData,
    RedirectAction,
    Route,
    VirtualHostSpec,
)
from albingress.builders.options import (
    BackendType,
    RouteOptions,
    VirtualHostOptions,
    build_route_options,
)
from albingress.builders.routes import (
    grpc_route,
    http_route,
    http_route_for_action,
    redirect_to_https_action,
)
from albingress.builders.virtualhosts import VirtualHost, VirtualHostTable
from albingress.errors import BackendGroupLookupError, ResourceNotReadyError
from albingress.metadata import LabelsProvider, Namer, NamespacedName

logger = structlog.get_logger()

BACKEND_GROUP_RESOURCE = "BackendGroup"


class SequentialIDs:
    """Hands out 0, 1, 2, ... for one build session."""

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)

    def next(self) -> int:
        return next(self._counter)


class HTTPRouterBuilder:
    """Builds one HTTP router from routing intents."""

    def __init__(
        self,
        tag: str,
        folder_id: str,
        names: Namer,
        labels: LabelsProvider,
        backend_group_finder: BackendGroupFinder,
        is_tls: bool = False,
    ) -> None:
        self.tag = tag
        self.folder_id = folder_id
        self.is_tls = is_tls
        self.names = names
        self.labels = labels
        self.backend_group_finder = backend_group_finder

        self._hosts = VirtualHostTable()

        self.vh_opts = VirtualHostOptions()
        self.route_opts = RouteOptions()
        self.namespace = ""

    def configure(
        self,
        vh_opts: VirtualHostOptions,
        route_opts: RouteOptions,
        namespace: str,
    ) -> None:
        """Set the options used by routes added from now on."""
        self.vh_opts = vh_opts
        self.route_opts = route_opts
        self.namespace = namespace

    def add_route(self, hp: HostAndPath, service_name: str) -> Route:
        """Forward ``hp`` to the backend group of a Kubernetes service.

        Raises:
            ResourceNotReadyError: If the service's backend group does not exist yet.
            BackendGroupLookupError: If the lookup failed.
            OptionConflictError: If virtual host options conflict.
        """
        bg_name = self.names.new_backend_group(NamespacedName(self.namespace, service_name))
        return self._add_forward(hp, self._find_backend_group(bg_name))

    def add_route_to_resource(self, hp: HostAndPath, resource_name: str) -> Route:
        """Forward ``hp`` to the backend group created from a custom resource.

        Raises:
            ResourceNotReadyError: If the backend group does not exist yet.
            BackendGroupLookupError: If the lookup failed.
            OptionConflictError: If virtual host options conflict.
        """
        bg_name = self.names.backend_group_for_cr(self.namespace, resource_name)
        return self._add_forward(hp, self._find_backend_group(bg_name))

    def add_direct_response(self, hp: HostAndPath, response: DirectResponseAction) -> Route:
        route = http_route_for_action(hp, response, self.route_opts.allowed_methods)
        return self._append_route(hp, route)

    def add_redirect(self, hp: HostAndPath, redirect: RedirectAction) -> Route:
        route = http_route_for_action(hp, redirect, self.route_opts.allowed_methods)
        return self._append_route(hp, route)

    def add_redirect_to_https(self, hp: HostAndPath) -> Route:
        route = http_route_for_action(
            hp, redirect_to_https_action(), self.route_opts.allowed_methods
        )
        return self._append_route(hp, route)

    def list_virtual_hosts(self) -> dict[str, VirtualHost]:
        """Virtual hosts collected so far, keyed by host."""
        return self._hosts.as_dict()

    def build(self) -> HTTPRouterData:
        """Emit the router with virtual hosts in first-seen host order.

        Virtual host IDs restart at 0 on every call, so repeated builds of the
        same session produce identical routers.
        """
        vh_ids = SequentialIDs()
        virtual_hosts = [
            VirtualHostSpec(
                name=self.names.virtual_host_for_id(self.tag, vh_ids.next()),
                authority=[vh.host],
                routes=list(vh.routes),
                route_options=build_route_options(
                    vh.options.modify_response, vh.options.security_profile_id
                ),
            )
            for vh in self._hosts.ordered()
        ]

        router_name = self.names.router_tls if self.is_tls else self.names.router
        router = HttpRouter(
            name=router_name(self.tag),
            description=f"router for k8s ingress with tag: {self.tag}",
            folder_id=self.folder_id,
            labels=self.labels.default(),
            virtual_hosts=virtual_hosts,
        )
        logger.debug(
            "HTTP router built",
            router=router.name,
            virtual_hosts=len(virtual_hosts),
            tls=self.is_tls,
        )
        return HTTPRouterData(router=router)

    def _find_backend_group(self, name: str) -> BackendGroup:
        lookup = self.backend_group_finder.find_backend_group(name)

        if lookup.status is LookupStatus.ABSENT:
            logger.info("Backend group not ready", backend_group=name, tag=self.tag)
            raise ResourceNotReadyError(BACKEND_GROUP_RESOURCE, name)

        if lookup.status is LookupStatus.ERROR:
            raise BackendGroupLookupError(name, lookup.error) from lookup.error

        assert lookup.backend_group is not None
        return lookup.backend_group

    def _add_forward(self, hp: HostAndPath, backend_group: BackendGroup) -> Route:
        if self.route_opts.backend_type is BackendType.GRPC:
            route = grpc_route(hp, self.route_opts, backend_group.id)
        else:
            route = http_route(hp, self.route_opts, backend_group.id)
        return self._append_route(hp, route)

    def _append_route(self, hp: HostAndPath, route: Route) -> Route:
        return self._hosts.append(hp, route, self.vh_opts, self._route_name)

    def _route_name(self, hp: HostAndPath, occurrences: int) -> str:
        # The first route for an intent keeps the index-free name older routers used.
        if occurrences == 0:
            return self.names.route_for_path(self.tag, hp.host, hp.path, hp.path_type)
        return self.names.route_for_path2(self.tag, hp.host, hp.path, hp.path_type, occurrences)

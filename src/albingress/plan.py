"""Declarative routing plans.

A plan describes one router build session in YAML or TOML: the ingresses,
their virtual host and route options, their rules, and the backend groups
that already exist. It lets a router be rendered without a cluster.

Example YAML plan:
    tag: main
    folder_id: b1g-folder
    backend_groups:
      default/web: bg-web
    resource_backend_groups:
      default/static-site: bg-static
    ingresses:
      - namespace: default
        virtual_host:
          security_profile_id: sp-1
          modify_response:
            append: {X-Frame-Options: DENY}
        route:
          timeout: 30
          backend_type: http
        rules:
          - host: example.com
            path: /
            path_type: Prefix
            service: web
          - host: example.com
            path: /static
            resource: static-site
          - host: old.example.com
            redirect_to_https: true
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

import structlog
from pydantic import BaseModel, Field, model_validator

from albingress.builders.finder import StaticBackendGroupFinder
from albingress.builders.hosts import HostAndPath, PathType
from albingress.builders.models import (
    DirectResponseAction,
    HTTPRouterData,
    RedirectAction,
    RedirectResponseCode,
)
from albingress.builders.options import (
    BackendType,
    ModifyResponseOptions,
    RouteOptions,
    VirtualHostOptions,
)
from albingress.builders.router import HTTPRouterBuilder
from albingress.config import BuilderSettings, get_settings
from albingress.metadata import LabelsProvider, Namer, NamespacedName

logger = structlog.get_logger()


def _seconds(value: float | None) -> timedelta | None:
    return timedelta(seconds=value) if value else None


def _split_key(key: str) -> NamespacedName:
    namespace, sep, name = key.partition("/")
    if not sep or not namespace or not name:
        raise ValueError(f"Backend group key must be 'namespace/name': {key!r}")
    return NamespacedName(namespace, name)


class ModifyResponseConfig(BaseModel):
    remove: list[str] = Field(default_factory=list)
    rename: dict[str, str] = Field(default_factory=dict)
    replace: dict[str, str] = Field(default_factory=dict)
    append: dict[str, str] = Field(default_factory=dict)

    def to_options(self) -> ModifyResponseOptions:
        return ModifyResponseOptions(
            remove={name: True for name in self.remove},
            rename=dict(self.rename),
            replace=dict(self.replace),
            append=dict(self.append),
        )


class VirtualHostOptionsConfig(BaseModel):
    security_profile_id: str = ""
    modify_response: ModifyResponseConfig = Field(default_factory=ModifyResponseConfig)

    def to_options(self) -> VirtualHostOptions:
        return VirtualHostOptions(
            modify_response=self.modify_response.to_options(),
            security_profile_id=self.security_profile_id,
        )


class RouteOptionsConfig(BaseModel):
    timeout: float | None = Field(
        default=None,
        description="Route timeout in seconds. Falls back to ALBINGRESS_DEFAULT_TIMEOUT.",
    )
    idle_timeout: float | None = Field(
        default=None,
        description="Idle timeout in seconds. Falls back to ALBINGRESS_DEFAULT_IDLE_TIMEOUT.",
    )
    prefix_rewrite: str = ""
    upgrade_types: list[str] = Field(default_factory=list)
    backend_type: BackendType = BackendType.HTTP
    use_regex: bool = Field(
        default=False,
        description="Treat every rule path of the ingress as a regular expression.",
    )
    allowed_methods: list[str] = Field(default_factory=list)

    def to_options(self, settings: BuilderSettings) -> RouteOptions:
        return RouteOptions(
            timeout=_seconds(self.timeout) if self.timeout is not None else settings.timeout(),
            idle_timeout=(
                _seconds(self.idle_timeout)
                if self.idle_timeout is not None
                else settings.idle_timeout()
            ),
            prefix_rewrite=self.prefix_rewrite,
            upgrade_types=list(self.upgrade_types),
            backend_type=self.backend_type,
            use_regex=self.use_regex,
            allowed_methods=[m.upper() for m in self.allowed_methods],
        )


class RedirectConfig(BaseModel):
    replace_scheme: str = ""
    replace_host: str = ""
    replace_port: int = 0
    replace_path: str = ""
    replace_prefix: str = ""
    remove_query: bool = False
    response_code: RedirectResponseCode = RedirectResponseCode.MOVED_PERMANENTLY

    def to_action(self) -> RedirectAction:
        return RedirectAction(**self.model_dump())


class DirectResponseConfig(BaseModel):
    status: int = Field(ge=100, le=599)
    body: str = ""

    def to_action(self) -> DirectResponseAction:
        return DirectResponseAction(status=self.status, body=self.body)


class RulePlan(BaseModel):
    """One host/path rule and where it sends traffic.

    Exactly one of service, resource, redirect_to_https, redirect or
    direct_response must be given.
    """

    host: str
    path: str = ""
    path_type: str = PathType.PREFIX.value
    service: str | None = None
    resource: str | None = None
    redirect_to_https: bool = False
    redirect: RedirectConfig | None = None
    direct_response: DirectResponseConfig | None = None

    @model_validator(mode="after")
    def _one_target(self) -> RulePlan:
        targets = [
            self.service is not None,
            self.resource is not None,
            self.redirect_to_https,
            self.redirect is not None,
            self.direct_response is not None,
        ]
        if sum(targets) != 1:
            raise ValueError(
                f"rule for host {self.host!r} path {self.path!r} needs exactly one of "
                "service, resource, redirect_to_https, redirect, direct_response"
            )
        return self

    def intent(self, use_regex: bool = False) -> HostAndPath:
        path_type = PathType.REGEX.value if use_regex else self.path_type
        return HostAndPath(host=self.host, path=self.path, path_type=path_type)


class IngressPlan(BaseModel):
    namespace: str = "default"
    name: str = ""
    virtual_host: VirtualHostOptionsConfig = Field(default_factory=VirtualHostOptionsConfig)
    route: RouteOptionsConfig = Field(default_factory=RouteOptionsConfig)
    rules: list[RulePlan] = Field(default_factory=list)


class RoutingPlan(BaseModel):
    """A complete build session."""

    tag: str
    folder_id: str | None = None
    tls: bool = False
    backend_groups: dict[str, str] = Field(
        default_factory=dict,
        description="Existing backend group IDs keyed by 'namespace/service'.",
    )
    resource_backend_groups: dict[str, str] = Field(
        default_factory=dict,
        description="Existing backend group IDs keyed by 'namespace/resource'.",
    )
    ingresses: list[IngressPlan] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutingPlan:
        return cls.model_validate(data)

    def backend_group_finder(self, names: Namer) -> StaticBackendGroupFinder:
        """Finder over the plan's backend groups, named the way the builder looks them up."""
        finder = StaticBackendGroupFinder()
        for key, bg_id in self.backend_groups.items():
            finder.add(names.new_backend_group(_split_key(key)), bg_id)
        for key, bg_id in self.resource_backend_groups.items():
            ref = _split_key(key)
            finder.add(names.backend_group_for_cr(ref.namespace, ref.name), bg_id)
        return finder


def apply_plan(
    plan: RoutingPlan,
    builder: HTTPRouterBuilder,
    settings: BuilderSettings | None = None,
) -> None:
    """Feed every rule of ``plan`` into ``builder``, ingress by ingress.

    Raises:
        RouterBuildError: On the first rule the builder rejects.
    """
    settings = settings or get_settings()
    for ingress in plan.ingresses:
        route_opts = ingress.route.to_options(settings)
        builder.configure(ingress.virtual_host.to_options(), route_opts, ingress.namespace)
        logger.debug(
            "Applying ingress",
            namespace=ingress.namespace,
            ingress=ingress.name,
            rules=len(ingress.rules),
        )

        for rule in ingress.rules:
            hp = rule.intent(use_regex=route_opts.use_regex)
            if rule.service is not None:
                builder.add_route(hp, rule.service)
            elif rule.resource is not None:
                builder.add_route_to_resource(hp, rule.resource)
            elif rule.redirect_to_https:
                builder.add_redirect_to_https(hp)
            elif rule.redirect is not None:
                builder.add_redirect(hp, rule.redirect.to_action())
            elif rule.direct_response is not None:
                builder.add_direct_response(hp, rule.direct_response.to_action())


def build_from_plan(
    plan: RoutingPlan,
    names: Namer,
    labels: LabelsProvider,
    settings: BuilderSettings | None = None,
    tls: bool | None = None,
) -> HTTPRouterData:
    """Run a whole build session for ``plan`` and return the router."""
    settings = settings or get_settings()
    builder = HTTPRouterBuilder(
        tag=plan.tag,
        folder_id=plan.folder_id if plan.folder_id is not None else settings.folder_id,
        names=names,
        labels=labels,
        backend_group_finder=plan.backend_group_finder(names),
        is_tls=plan.tls if tls is None else tls,
    )
    apply_plan(plan, builder, settings)
    return builder.build()

"""albingress CLI - render load balancer routers from routing plans."""

from __future__ import annotations

import json
import logging
import sys

import click
import structlog
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from albingress import __version__
from albingress.builders.models import HttpRouteAction, HTTPRouterData, RedirectAction, Route
from albingress.config import get_settings, load_config_from_file
from albingress.errors import RouterBuildError
from albingress.metadata import Labels, Names
from albingress.plan import RoutingPlan, build_from_plan

console = Console()


def _configure_logging(log_level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _describe_action(route: Route) -> str:
    if route.grpc is not None:
        return f"grpc -> {route.grpc.action.backend_group_id}"
    assert route.http is not None
    action = route.http.action
    if isinstance(action, HttpRouteAction):
        return f"http -> {action.backend_group_id}"
    if isinstance(action, RedirectAction):
        return f"redirect ({action.response_code.value})"
    return f"direct response {action.status}"


def _describe_match(route: Route) -> str:
    match = route.grpc.match.fqmn if route.grpc is not None else route.http.match.path
    if match is None:
        return "*"
    return next(f"{kind}: {value}" for kind, value in match.to_dict().items())


def _print_router(data: HTTPRouterData) -> None:
    router = data.router
    console.print(f"\n[bold]Router:[/bold] {router.name}")
    console.print(f"[bold]Description:[/bold] {router.description}")
    if router.labels:
        labels = ", ".join(f"{k}={v}" for k, v in router.labels.items())
        console.print(f"[bold]Labels:[/bold] {labels}")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Virtual Host")
    table.add_column("Authority")
    table.add_column("Route")
    table.add_column("Match")
    table.add_column("Action")
    for vh in router.virtual_hosts:
        for route in vh.routes:
            table.add_row(
                vh.name,
                ", ".join(vh.authority),
                route.name,
                _describe_match(route),
                _describe_action(route),
            )
    console.print(table)


@click.group()
def main():
    """albingress - build load balancer routers from ingress rules."""


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--tls/--no-tls", default=None, help="Render the TLS router (overrides the plan)")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (default: ALBINGRESS_LOG_LEVEL or warning)",
)
def render(plan_file: str, tls: bool | None, json_output: bool, log_level: str | None):
    """Render the router described by PLAN_FILE (YAML or TOML)."""
    settings = get_settings()
    _configure_logging(log_level or settings.log_level)

    try:
        plan = RoutingPlan.from_dict(load_config_from_file(plan_file))
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Failed to load plan:[/red] {escape(str(e))}")
        sys.exit(1)

    names = Names(cluster_id=settings.cluster_id, prefix=settings.name_prefix)
    labels = Labels(cluster_id=settings.cluster_id)
    try:
        data = build_from_plan(plan, names, labels, settings=settings, tls=tls)
    except RouterBuildError as e:
        console.print(f"[red]Failed to build router:[/red] {escape(str(e))}")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(data.to_dict(), indent=2))
    else:
        _print_router(data)


@main.command()
def version():
    """Show version information."""
    console.print(f"[bold]Version:[/bold] {__version__}")
    console.print(f"[bold]Python:[/bold] {escape(sys.version)}")


if __name__ == "__main__":
    main()

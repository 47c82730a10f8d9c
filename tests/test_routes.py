"""Tests for path matchers and route constructors."""

from __future__ import annotations

from datetime import timedelta

import pytest

from albingress.builders import (
    BackendType,
    DirectResponseAction,
    GrpcRouteAction,
    HostAndPath,
    HttpRouteAction,
    PathType,
    RedirectResponseCode,
    Route,
    RouteOptions,
    StringMatch,
    grpc_route,
    http_route,
    http_route_for_action,
    match_for_path,
    redirect_to_https_action,
)


class TestHostAndPath:
    """Tests for HostAndPath."""

    def test_structural_equality(self):
        """Test equal intents are equal dictionary keys."""
        counts = {HostAndPath("a.com", "/x", "Exact"): 1}
        assert counts[HostAndPath("a.com", "/x", "Exact")] == 1

    def test_enum_path_type_normalized(self):
        """Test PathType members are stored as their string value."""
        assert HostAndPath("a.com", "/x", PathType.EXACT) == HostAndPath("a.com", "/x", "Exact")

    def test_different_kinds_differ(self):
        """Test the path kind is part of identity."""
        assert HostAndPath("a.com", "/x", "Exact") != HostAndPath("a.com", "/x", "Prefix")


class TestMatchForPath:
    """Tests for match_for_path."""

    def test_empty_path_matches_all(self):
        """Test an empty path produces no matcher."""
        assert match_for_path(HostAndPath("a.com", "", "Exact")) is None
        assert match_for_path(HostAndPath("a.com", "", "Regex")) is None

    def test_regex(self):
        """Test Regex kind produces a regex matcher."""
        assert match_for_path(HostAndPath("a.com", "/v[0-9]+", "Regex")) == StringMatch(
            regex_match="/v[0-9]+"
        )

    def test_prefix(self):
        """Test Prefix kind produces a prefix matcher."""
        assert match_for_path(HostAndPath("a.com", "/api", "Prefix")) == StringMatch(
            prefix_match="/api"
        )

    @pytest.mark.parametrize("kind", ["Exact", "ImplementationSpecific", "Something", ""])
    def test_other_kinds_are_exact(self, kind):
        """Test any other kind falls back to an exact matcher."""
        assert match_for_path(HostAndPath("a.com", "/x", kind)) == StringMatch(exact_match="/x")


class TestHttpRoute:
    """Tests for HTTP route construction."""

    def test_forward_action_fields(self):
        """Test the forward action carries all HTTP route options."""
        opts = RouteOptions(
            timeout=timedelta(seconds=30),
            idle_timeout=timedelta(seconds=90),
            prefix_rewrite="/new",
            upgrade_types=["websocket"],
            allowed_methods=["GET", "POST"],
        )

        route = http_route(HostAndPath("a.com", "/api", "Prefix"), opts, "bg-1")

        assert route.grpc is None
        assert route.http is not None
        assert route.http.match.path == StringMatch(prefix_match="/api")
        assert route.http.match.http_methods == ("GET", "POST")
        assert route.http.action == HttpRouteAction(
            backend_group_id="bg-1",
            timeout=timedelta(seconds=30),
            idle_timeout=timedelta(seconds=90),
            prefix_rewrite="/new",
            upgrade_types=("websocket",),
        )

    def test_forward_to_dict(self):
        """Test the JSON mapping of an HTTP forward route."""
        opts = RouteOptions(timeout=timedelta(seconds=60), upgrade_types=["websocket"])
        route = http_route(HostAndPath("a.com", "/", "Prefix"), opts, "bg-1")

        assert route.to_dict() == {
            "name": "",
            "http": {
                "match": {"path": {"prefixMatch": "/"}},
                "route": {
                    "backendGroupId": "bg-1",
                    "timeout": "60s",
                    "upgradeTypes": ["websocket"],
                },
            },
        }

    def test_match_all_without_methods_omits_match(self):
        """Test a match-all route has no match in its JSON mapping."""
        route = http_route(HostAndPath("a.com"), RouteOptions(), "bg-1")
        assert "match" not in route.to_dict()["http"]

    def test_direct_response_route(self):
        """Test wrapping a direct response action."""
        route = http_route_for_action(
            HostAndPath("a.com", "/health", "Exact"),
            DirectResponseAction(status=200, body="ok"),
        )

        assert route.to_dict()["http"] == {
            "match": {"path": {"exactMatch": "/health"}},
            "directResponse": {"status": 200, "body": {"text": "ok"}},
        }


class TestGrpcRoute:
    """Tests for gRPC route construction."""

    def test_grpc_route_fields(self):
        """Test the gRPC action reuses the timeout as max timeout."""
        opts = RouteOptions(
            timeout=timedelta(seconds=5),
            idle_timeout=timedelta(seconds=10),
            prefix_rewrite="/ignored",
            backend_type=BackendType.GRPC,
        )

        route = grpc_route(HostAndPath("a.com", "/pkg.Service/", "Prefix"), opts, "bg-1")

        assert route.http is None
        assert route.grpc is not None
        assert route.grpc.match.fqmn == StringMatch(prefix_match="/pkg.Service/")
        assert route.grpc.action == GrpcRouteAction(
            backend_group_id="bg-1",
            max_timeout=timedelta(seconds=5),
            idle_timeout=timedelta(seconds=10),
        )

    def test_grpc_to_dict(self):
        """Test the JSON mapping of a gRPC route."""
        route = grpc_route(
            HostAndPath("a.com", "/pkg.Service/Call", "Exact"),
            RouteOptions(timeout=timedelta(milliseconds=1500)),
            "bg-1",
        )

        assert route.to_dict() == {
            "name": "",
            "grpc": {
                "match": {"fqmn": {"exactMatch": "/pkg.Service/Call"}},
                "route": {"backendGroupId": "bg-1", "maxTimeout": "1.5s"},
            },
        }


class TestRedirectToHTTPS:
    """Tests for the fixed HTTPS redirect policy."""

    def test_policy(self):
        """Test scheme, port, query handling and status code."""
        action = redirect_to_https_action()

        assert action.replace_scheme == "https"
        assert action.replace_port == 443
        assert action.remove_query is False
        assert action.response_code is RedirectResponseCode.MOVED_PERMANENTLY
        assert action.to_dict() == {
            "replaceScheme": "https",
            "replacePort": 443,
            "responseCode": "MOVED_PERMANENTLY",
        }


class TestRouteValidation:
    """Tests for output shape invariants."""

    def test_route_requires_one_protocol(self):
        """Test a route without http or grpc is rejected."""
        with pytest.raises(ValueError):
            Route(name="r")

    def test_string_match_requires_one_kind(self):
        """Test a string match with two kinds is rejected."""
        with pytest.raises(ValueError):
            StringMatch(exact_match="/a", prefix_match="/a")

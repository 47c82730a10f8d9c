"""Errors raised while building an HTTP router.

All errors derive from RouterBuildError so a reconciliation loop can catch
the whole family in one place. ResourceNotReadyError is the only recoverable
one: the caller retries the build once the backend group has been created.
"""

from __future__ import annotations

from typing import Any


class RouterBuildError(Exception):
    """Base exception for router build failures."""


class ResourceNotReadyError(RouterBuildError):
    """A referenced cloud resource does not exist yet."""

    def __init__(self, resource_type: str, name: str) -> None:
        self.resource_type = resource_type
        self.name = name
        super().__init__(f"{resource_type} {name} is not ready")


class BackendGroupLookupError(RouterBuildError):
    """Resolving a backend group failed for a reason other than absence.

    Always raised ``from`` the underlying error.
    """

    def __init__(self, name: str, cause: BaseException | None = None) -> None:
        self.name = name
        self.cause = cause
        message = f"error finding backend group {name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class OptionConflictError(RouterBuildError):
    """Two contributions to one virtual host disagree on an option."""

    def __init__(
        self,
        option: str,
        first: Any,
        second: Any,
        key: str | None = None,
    ) -> None:
        self.option = option
        self.first = first
        self.second = second
        self.key = key
        if key is None:
            message = f"conflict with vh {option}: {first} and {second}"
        else:
            message = f"conflict with vh {option}: key {key!r} has values {first!r} and {second!r}"
        super().__init__(message)

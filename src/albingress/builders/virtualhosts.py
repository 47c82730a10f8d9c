"""Virtual host aggregation.

Routes arrive one call at a time, in any host order. The table groups them
per host, remembers the order in which hosts were first seen, merges the
virtual host options every contribution brings, and counts repeated
(host, path, path type) intents so later duplicates get distinct names.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace

import structlog

from albingress.builders.hosts import HostAndPath
from albingress.builders.models import Route
from albingress.builders.options import VirtualHostOptions, merge_virtual_host_options

logger = structlog.get_logger()

RouteNamer = Callable[[HostAndPath, int], str]
"""Names a route given its intent and how many identical intents came before."""


@dataclass
class VirtualHost:
    """Routes and merged options collected for one host."""

    host: str
    order: int
    options: VirtualHostOptions
    occurrences: dict[HostAndPath, int] = field(default_factory=dict)
    routes: list[Route] = field(default_factory=list)

    def occurrence_count(self, hp: HostAndPath) -> int:
        return self.occurrences.get(hp, 0)


class VirtualHostTable:
    """Per-session table of virtual hosts keyed by host.

    Not safe for concurrent use: creation versus merge is a read-modify-write
    over the table.
    """

    def __init__(self) -> None:
        self._hosts: dict[str, VirtualHost] = {}

    def ensure(self, host: str, options: VirtualHostOptions) -> VirtualHost:
        """Return the virtual host for ``host``, creating or merging into it.

        A new virtual host gets a copy of ``options``. An existing one has
        ``options`` merged into its own; the merge result is only stored
        once it is known to be conflict free.

        Raises:
            OptionConflictError: If ``options`` conflicts with the host's options.
        """
        vh = self._hosts.get(host)
        if vh is None:
            vh = VirtualHost(host=host, order=len(self._hosts), options=options.clone())
            self._hosts[host] = vh
            logger.debug("Virtual host created", host=host, order=vh.order)
            return vh

        vh.options = merge_virtual_host_options(vh.options, options)
        logger.debug("Virtual host options merged", host=host)
        return vh

    def append(
        self,
        hp: HostAndPath,
        route: Route,
        options: VirtualHostOptions,
        namer: RouteNamer,
    ) -> Route:
        """Attach ``route`` to the virtual host of ``hp.host`` and name it.

        Returns the named route that was stored.
        """
        vh = self.ensure(hp.host, options)
        named = replace(route, name=namer(hp, vh.occurrence_count(hp)))
        vh.routes.append(named)
        vh.occurrences[hp] = vh.occurrence_count(hp) + 1
        logger.debug(
            "Route appended",
            host=hp.host,
            path=hp.path,
            path_type=hp.path_type,
            route=named.name,
        )
        return named

    def get(self, host: str) -> VirtualHost | None:
        return self._hosts.get(host)

    def ordered(self) -> list[VirtualHost]:
        """Virtual hosts in first-seen order."""
        return sorted(self._hosts.values(), key=lambda vh: vh.order)

    def as_dict(self) -> dict[str, VirtualHost]:
        return dict(self._hosts)

    def __iter__(self) -> Iterator[VirtualHost]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self._hosts)

    def __contains__(self, host: object) -> bool:
        return host in self._hosts

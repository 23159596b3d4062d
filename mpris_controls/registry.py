"""Registry of MPRIS player sessions currently on the bus."""

import re
from typing import Iterator, Tuple

from mpris_controls.exceptions import TransportError
from mpris_controls.logging import get_logger
from mpris_controls.protocol import MPRIS2_PREFIX, Transport

logger = get_logger(__name__)

# Well-known bus name: dot-separated elements of [A-Za-z0-9_-], none starting with a digit
_BUS_NAME_RE = re.compile(r'^[A-Za-z_-][A-Za-z0-9_-]*(\.[A-Za-z_-][A-Za-z0-9_-]*)+$')


def is_player_service(name: str) -> bool:
    """Return True if ``name`` is a well-formed bus name in the MPRIS namespace."""
    return (
        name.startswith(MPRIS2_PREFIX)
        and len(name) > len(MPRIS2_PREFIX)
        and len(name) <= 255
        and _BUS_NAME_RE.match(name) is not None
    )


class PlayerRegistry:
    """
    Ordered set of known player sessions.

    Sessions keep the position at which they were first discovered; every
    rescan replaces the contents in one assignment so readers never see a
    half-updated list.
    """

    def __init__(self, transport: Transport):
        self._transport = transport
        self._players: Tuple[str, ...] = ()

    @property
    def players(self) -> Tuple[str, ...]:
        return self._players

    def __contains__(self, service: object) -> bool:
        return service in self._players

    def __iter__(self) -> Iterator[str]:
        return iter(self._players)

    def __len__(self) -> int:
        return len(self._players)

    def rescan(self) -> Tuple[str, ...]:
        """
        Re-enumerate the bus and replace the registry contents.

        An unreachable bus leaves an empty registry, which is the normal
        "no players" state.

        Returns:
            The players now known, in discovery order
        """
        try:
            names = self._transport.list_services()
        except TransportError as e:
            logger.debug("Player enumeration failed: %s", e)
            names = []

        found = []
        for name in names:
            name = str(name)
            if is_player_service(name) and name not in found:
                found.append(name)

        # Known sessions keep discovery order, new ones go to the end
        ordered = [name for name in self._players if name in found]
        ordered.extend(name for name in found if name not in ordered)

        previous, self._players = self._players, tuple(ordered)
        if previous != self._players:
            logger.debug("Players: %s", ", ".join(self._players) or "none")
        return self._players

    def on_registered(self, service: str) -> Tuple[str, ...]:
        """Handle a registration notification."""
        logger.debug("Player registered: %s", service)
        return self.rescan()

    def on_unregistered(self, service: str) -> Tuple[str, ...]:
        """Handle an unregistration notification."""
        logger.debug("Player unregistered: %s", service)
        return self.rescan()

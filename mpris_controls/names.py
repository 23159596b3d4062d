"""Human-readable names for player sessions."""

import re
from typing import Dict, Optional, Pattern, Tuple

from mpris_controls.exceptions import TransportError
from mpris_controls.logging import get_logger
from mpris_controls.protocol import MPRIS2_PREFIX, MPRIS2_ROOT_INTERFACE, Transport

logger = get_logger(__name__)

INSTANCE_MARKER = '.instance'

# Multi-instance players whose instance suffix should not show up in the name.
# Matched against the bus name with the MPRIS prefix removed.
KNOWN_PLAYERS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r'^firefox\.instance'), 'Firefox'),
    (re.compile(r'^chromium\.instance'), 'Chromium'),
    (re.compile(r'^chrome\.instance'), 'Chrome'),
    (re.compile(r'^spotify\.instance'), 'Spotify'),
    (re.compile(r'^vlc\.instance'), 'VLC'),
)


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def name_from_service(service: str) -> str:
    """
    Derive a display name from the bus name alone.

    Args:
        service: Full bus name, e.g. ``org.mpris.MediaPlayer2.vlc.instance42``

    Returns:
        A non-empty display name
    """
    short = service[len(MPRIS2_PREFIX):] if service.startswith(MPRIS2_PREFIX) else service

    for pattern, display_name in KNOWN_PLAYERS:
        if pattern.match(short):
            return display_name

    base = short.split(INSTANCE_MARKER, 1)[0]
    return _capitalize_first(base) or _capitalize_first(short) or service or 'Unknown player'


class DisplayNameResolver:
    """
    Resolves and caches display names for player sessions.

    Identity wins over DesktopEntry, which wins over the bus name; any
    failed property read just falls through to the next source.
    """

    def __init__(self, transport: Transport):
        self._transport = transport
        self._cache: Dict[str, str] = {}

    def _root_property(self, service: str, name: str) -> Optional[str]:
        try:
            value = self._transport.get_property(service, MPRIS2_ROOT_INTERFACE, name)
        except TransportError as e:
            logger.debug("Could not read %s of %s: %s", name, service, e)
            return None
        if value is None:
            return None
        return str(value)

    def resolve(self, service: str) -> str:
        """Return a non-empty human-readable name for ``service``."""
        cached = self._cache.get(service)
        if cached:
            return cached

        identity = self._root_property(service, 'Identity')
        if identity:
            name = identity
        else:
            desktop_entry = self._root_property(service, 'DesktopEntry')
            if not desktop_entry:
                # Not cached; the player may export its object later
                return name_from_service(service)
            name = _capitalize_first(desktop_entry)

        self._cache[service] = name
        return name

    def retain(self, services) -> None:
        """Drop cached names for sessions no longer in ``services``."""
        keep = set(services)
        for service in list(self._cache):
            if service not in keep:
                del self._cache[service]

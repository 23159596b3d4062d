"""MPRIS2 protocol constants and the transport capability interface.

The selection and polling logic only ever talks to a ``Transport``; the
D-Bus implementation lives in ``mpris_controls.dbus_transport`` and tests
substitute a scripted fake.
"""

from typing import Any, Callable, List, Protocol

# MPRIS2 names, bit-for-bit as real players expose them
MPRIS2_PREFIX = 'org.mpris.MediaPlayer2.'
MPRIS2_OBJECT_PATH = '/org/mpris/MediaPlayer2'
MPRIS2_ROOT_INTERFACE = 'org.mpris.MediaPlayer2'
MPRIS2_PLAYER_INTERFACE = 'org.mpris.MediaPlayer2.Player'
PROPERTIES_INTERFACE = 'org.freedesktop.DBus.Properties'


class PlayerConnection(Protocol):
    """A bound handle to one player session, owned by the SessionController."""

    @property
    def service(self) -> str:
        """Bus name this connection is bound to."""
        ...

    def get_property(self, name: str, interface: str = MPRIS2_PLAYER_INTERFACE) -> Any:
        """Read a property. Raises TransportError on failure."""
        ...

    def call(self, method: str, *args: Any) -> None:
        """Invoke a method on the player interface. Raises TransportError on failure."""
        ...

    def close(self) -> None:
        """Release the handle. Safe to call more than once."""
        ...


class Transport(Protocol):
    """Defines the session-bus capabilities the controller needs."""

    def list_services(self) -> List[str]:
        """Return every registered bus name. Raises TransportError if the bus is unreachable."""
        ...

    def get_property(self, service: str, interface: str, name: str) -> Any:
        """Connectionless property read used for probes. Raises TransportError on failure."""
        ...

    def open(self, service: str) -> PlayerConnection:
        """Bind a persistent connection to ``service``. Raises BindError when invalid."""
        ...

    def subscribe(self, on_registered: Callable[[str], None],
                  on_unregistered: Callable[[str], None]) -> None:
        """Deliver name registration/unregistration notifications for MPRIS services."""
        ...

    def close(self) -> None:
        """Drop notification subscriptions."""
        ...

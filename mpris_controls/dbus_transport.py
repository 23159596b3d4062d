"""Session-bus transport for MPRIS2 players using dbus-python."""

from typing import Any, Callable, List, Optional

import dbus
from dbus.mainloop.glib import DBusGMainLoop

from mpris_controls.config import DEFAULT_DBUS_TIMEOUT
from mpris_controls.dbus_utils import translate_dbus_errors
from mpris_controls.exceptions import BindError, TransportError
from mpris_controls.logging import get_logger
from mpris_controls.protocol import (
    MPRIS2_OBJECT_PATH,
    MPRIS2_PLAYER_INTERFACE,
    MPRIS2_PREFIX,
    PROPERTIES_INTERFACE,
)

logger = get_logger(__name__)

DBUS_SERVICE = 'org.freedesktop.DBus'
DBUS_OBJECT_PATH = '/org/freedesktop/DBus'

# Wire types for player methods whose arguments need explicit D-Bus types
_ARGUMENT_TYPES = {
    'SetPosition': (dbus.ObjectPath, dbus.Int64),
}


class DBusPlayerConnection:
    """Method and property handles bound to one player's object."""

    def __init__(self, bus: dbus.Bus, service: str, timeout: float):
        self._service = service
        self._timeout = timeout
        # Resolves the name owner, so a vanished player fails here
        player_obj = bus.get_object(service, MPRIS2_OBJECT_PATH)
        self._player: Optional[dbus.Interface] = dbus.Interface(player_obj, MPRIS2_PLAYER_INTERFACE)
        self._properties: Optional[dbus.Interface] = dbus.Interface(player_obj, PROPERTIES_INTERFACE)

    @property
    def service(self) -> str:
        return self._service

    @translate_dbus_errors()
    def get_property(self, name: str, interface: str = MPRIS2_PLAYER_INTERFACE) -> Any:
        if self._properties is None:
            raise TransportError(f"Connection to {self._service} is closed")
        return self._properties.Get(interface, name, timeout=self._timeout)

    @translate_dbus_errors()
    def call(self, method: str, *args: Any) -> None:
        if self._player is None:
            raise TransportError(f"Connection to {self._service} is closed")
        types = _ARGUMENT_TYPES.get(method)
        if types:
            try:
                args = tuple(wire_type(arg) for wire_type, arg in zip(types, args))
            except (TypeError, ValueError) as e:
                raise TransportError(f"Invalid arguments for {method}: {e}") from e
        getattr(self._player, method)(*args, timeout=self._timeout)

    def close(self) -> None:
        self._player = None
        self._properties = None


class DBusTransport:
    """Transport over the D-Bus session bus."""

    def __init__(self, bus: Optional[dbus.Bus] = None, timeout: float = DEFAULT_DBUS_TIMEOUT):
        """
        Initialize the transport.

        Args:
            bus: Bus connection to use (defaults to the session bus on the GLib main loop)
            timeout: Seconds to wait for any single call
        """
        if bus is None:
            DBusGMainLoop(set_as_default=True)
            try:
                bus = dbus.SessionBus()
            except dbus.exceptions.DBusException as e:
                raise TransportError(f"Session bus unavailable: {e}") from e
        self.bus = bus
        self._timeout = timeout
        self._on_registered: Optional[Callable[[str], None]] = None
        self._on_unregistered: Optional[Callable[[str], None]] = None

        # Track signal receivers for cleanup
        self._signal_receivers = []

    @translate_dbus_errors()
    def list_services(self) -> List[str]:
        return [str(name) for name in self.bus.list_names()]

    @translate_dbus_errors()
    def get_property(self, service: str, interface: str, name: str) -> Any:
        # No introspection round trip; this proxy is dropped right after the read
        proxy = self.bus.get_object(service, MPRIS2_OBJECT_PATH, introspect=False)
        return proxy.Get(interface, name, dbus_interface=PROPERTIES_INTERFACE,
                         timeout=self._timeout)

    @translate_dbus_errors(BindError)
    def open(self, service: str) -> DBusPlayerConnection:
        return DBusPlayerConnection(self.bus, service, self._timeout)

    def subscribe(self, on_registered: Callable[[str], None],
                  on_unregistered: Callable[[str], None]) -> None:
        """Watch NameOwnerChanged for names in the MPRIS namespace."""
        self._on_registered = on_registered
        self._on_unregistered = on_unregistered
        try:
            receiver = self.bus.add_signal_receiver(
                self._on_name_owner_changed,
                signal_name='NameOwnerChanged',
                dbus_interface=DBUS_SERVICE,
                bus_name=DBUS_SERVICE,
                path=DBUS_OBJECT_PATH,
            )
            self._signal_receivers.append(receiver)
        except dbus.exceptions.DBusException as e:
            # Without notifications the periodic rescan still finds players
            logger.error("Error setting up player notifications: %s", e, exc_info=True)

    def _on_name_owner_changed(self, name, old_owner, new_owner) -> None:
        name = str(name)
        if not name.startswith(MPRIS2_PREFIX):
            return
        if new_owner and self._on_registered:
            self._on_registered(name)
        elif old_owner and not new_owner and self._on_unregistered:
            self._on_unregistered(name)

    def close(self) -> None:
        for receiver in self._signal_receivers:
            try:
                receiver.remove()
            except Exception as e:
                logger.debug("Error removing signal receiver: %s", e)
        self._signal_receivers = []

"""Pytest configuration and fixtures."""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import MagicMock

# Mock GLib before imports
import sys

sys.modules['gi'] = MagicMock()
sys.modules['gi.repository'] = MagicMock()
sys.modules['gi.repository.GLib'] = MagicMock()

from mpris_controls.exceptions import BindError, TransportError
from mpris_controls.protocol import MPRIS2_PLAYER_INTERFACE, MPRIS2_ROOT_INTERFACE


def track(title="", artists=None, album="", length_us=0, trackid="/org/mpris/MediaPlayer2/Track/1"):
    """Build an MPRIS Metadata dictionary."""
    metadata = {"mpris:trackid": trackid}
    if title:
        metadata["xesam:title"] = title
    if artists is not None:
        metadata["xesam:artist"] = artists
    if album:
        metadata["xesam:album"] = album
    if length_us:
        metadata["mpris:length"] = length_us
    return metadata


class FakePlayer:
    """Scripted state of one player process."""

    def __init__(self, status="Stopped", metadata=None, position_us=0,
                 identity=None, desktop_entry=None, reachable=True, bindable=True):
        self.status = status
        self.metadata = metadata if metadata is not None else {}
        self.position_us = position_us
        self.identity = identity
        self.desktop_entry = desktop_entry
        self.reachable = reachable
        self.bindable = bindable
        # Property names whose reads fail
        self.failing = set()

    def read(self, interface, name):
        if not self.reachable or name in self.failing:
            raise TransportError(f"{name} unavailable", error_name="org.freedesktop.DBus.Error.NoReply")
        values = {
            (MPRIS2_PLAYER_INTERFACE, "PlaybackStatus"): self.status,
            (MPRIS2_PLAYER_INTERFACE, "Metadata"): self.metadata,
            (MPRIS2_PLAYER_INTERFACE, "Position"): self.position_us,
            (MPRIS2_ROOT_INTERFACE, "Identity"): self.identity,
            (MPRIS2_ROOT_INTERFACE, "DesktopEntry"): self.desktop_entry,
        }
        value = values.get((interface, name))
        if value is None:
            raise TransportError(f"No such property {name}",
                                 error_name="org.freedesktop.DBus.Error.InvalidArgs")
        return value


class FakeConnection:
    def __init__(self, transport, service):
        self.transport = transport
        self._service = service
        self.closed = False

    @property
    def service(self):
        return self._service

    def _player(self):
        player = self.transport.players.get(self._service)
        if player is None or self.closed:
            raise TransportError(f"{self._service} went away")
        return player

    def get_property(self, name, interface=MPRIS2_PLAYER_INTERFACE):
        self.transport.reads.append((self._service, name))
        return self._player().read(interface, name)

    def call(self, method, *args):
        player = self._player()
        self.transport.calls.append((self._service, method) + args)
        if method in self.transport.rejected_methods:
            raise TransportError(f"{method} rejected")
        if method == "Play":
            player.status = "Playing"
        elif method == "Pause":
            player.status = "Paused"

    def close(self):
        self.closed = True


class FakeTransport:
    """In-memory Transport with scripted players."""

    def __init__(self):
        self.players = {}
        self.other_services = [":1.7", "org.freedesktop.Notifications"]
        self.available = True
        self.probes = []
        self.calls = []
        # (service, property) reads through bound connections
        self.reads = []
        self.rejected_methods = set()
        self.connections = []
        self.on_registered = None
        self.on_unregistered = None
        self.closed = False

    def add(self, service, **kwargs):
        self.players[service] = FakePlayer(**kwargs)
        return self.players[service]

    def remove(self, service):
        del self.players[service]

    def list_services(self):
        if not self.available:
            raise TransportError("Session bus unavailable")
        return list(self.other_services) + list(self.players)

    def get_property(self, service, interface, name):
        if name == "PlaybackStatus":
            self.probes.append(service)
        player = self.players.get(service)
        if player is None:
            raise TransportError(f"{service} has no owner",
                                 error_name="org.freedesktop.DBus.Error.NameHasNoOwner")
        return player.read(interface, name)

    def open(self, service):
        player = self.players.get(service)
        if player is None or not player.bindable:
            raise BindError(f"Cannot bind {service}")
        connection = FakeConnection(self, service)
        self.connections.append(connection)
        return connection

    def subscribe(self, on_registered, on_unregistered):
        self.on_registered = on_registered
        self.on_unregistered = on_unregistered

    def close(self):
        self.closed = True


PLAYER_A = "org.mpris.MediaPlayer2.alpha"
PLAYER_B = "org.mpris.MediaPlayer2.beta"
PLAYER_C = "org.mpris.MediaPlayer2.gamma"


@pytest.fixture
def transport():
    """Create an empty fake transport."""
    return FakeTransport()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_config(monkeypatch, temp_dir):
    """Configuration rooted in temporary XDG directories."""
    from mpris_controls.config import Config

    monkeypatch.setenv('XDG_CONFIG_HOME', str(temp_dir / 'config'))
    monkeypatch.setenv('XDG_DATA_HOME', str(temp_dir / 'data'))
    Config.reset_instance()
    yield Config.get_instance()
    Config.reset_instance()

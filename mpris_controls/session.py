"""Persistent connection to the active player and its polled state."""

from enum import Enum
from typing import Optional

from mpris_controls.exceptions import BindError, TransportError
from mpris_controls.logging import get_logger
from mpris_controls.protocol import PlayerConnection, Transport
from mpris_controls.state import PlaybackState, StateModel, ms_to_us, parse_metadata, us_to_ms

logger = get_logger(__name__)


class SessionState(Enum):
    """Connection state of the controller."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Command(Enum):
    """Playback commands accepted by the controller."""

    PLAY_PAUSE = "play_pause"
    PREVIOUS = "previous"
    NEXT = "next"
    SEEK = "seek"


class SessionController:
    """
    Owns the single live connection to the active player.

    Every poll refreshes three independent groups of the state model
    (status, metadata, position). A failed query leaves its group as it
    was; the next poll tries again.
    """

    def __init__(self, transport: Transport):
        self._transport = transport
        self._connection: Optional[PlayerConnection] = None
        self._model = StateModel()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return SessionState.CONNECTED if self._connection else SessionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    @property
    def active_player(self) -> str:
        return self._model.player

    def current_state(self) -> StateModel:
        """Return a copy of the current state model."""
        return self._model.copy()

    def connect(self, service: str) -> bool:
        """
        Bind to ``service`` and populate the state model from it.

        Args:
            service: Bus name of the player session

        Returns:
            True if the controller is now connected to ``service``
        """
        self.disconnect()

        try:
            connection = self._transport.open(service)
        except BindError as e:
            logger.warning("Could not connect to %s: %s", service, e)
            return False

        self._connection = connection
        self._model.player = service
        logger.info("Connected to player %s", service)
        self.poll()
        return True

    def disconnect(self) -> None:
        """Release the connection and clear the state model. Idempotent."""
        connection, self._connection = self._connection, None
        if connection is not None:
            try:
                connection.close()
            except TransportError as e:
                logger.debug("Error closing connection to %s: %s", connection.service, e)
            logger.info("Disconnected from player %s", connection.service)
        self._model.clear()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------
    def poll(self) -> None:
        """Refresh status, metadata and position from the active player."""
        if self._connection is None:
            return
        self._poll_status()
        self._poll_metadata()
        if self._model.has_position:
            self._poll_position()

    def _poll_status(self) -> None:
        try:
            status = self._connection.get_property('PlaybackStatus')
        except TransportError as e:
            logger.debug("PlaybackStatus query failed: %s", e)
            return
        self._model.playback_state = PlaybackState.from_wire(status)

    def _poll_metadata(self) -> None:
        try:
            fields = parse_metadata(self._connection.get_property('Metadata'))
        except (TransportError, ValueError) as e:
            logger.debug("Metadata query failed: %s", e)
            return

        model = self._model
        model.title = fields['title']
        model.artist = fields['artist']
        model.album = fields['album']
        model.duration_ms = fields['duration_ms']
        model.has_position = model.duration_ms > 0
        if not model.has_position:
            model.position_ms = 0

    def _poll_position(self) -> None:
        try:
            position_ms = us_to_ms(self._connection.get_property('Position'))
        except (TransportError, TypeError, ValueError) as e:
            logger.debug("Position query failed: %s", e)
            return
        self._model.position_ms = position_ms

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def command(self, action: Command, position_ms: Optional[int] = None) -> None:
        """
        Send a playback command to the active player.

        Args:
            action: Command to send
            position_ms: Target position, required for Command.SEEK
        """
        if action is Command.PLAY_PAUSE:
            self.play_pause()
        elif action is Command.PREVIOUS:
            self.previous()
        elif action is Command.NEXT:
            self.next()
        elif action is Command.SEEK:
            if position_ms is None:
                raise ValueError("Command.SEEK needs a position")
            self.seek(position_ms)

    def _send(self, method: str, *args) -> None:
        if self._connection is None:
            return
        try:
            self._connection.call(method, *args)
        except TransportError as e:
            # Not retried; the next poll shows what the player actually did
            logger.debug("%s on %s failed: %s", method, self._connection.service, e)

    def play_pause(self) -> None:
        """Toggle playback based on the cached state."""
        if self._model.playback_state is PlaybackState.PLAYING:
            self._send('Pause')
        else:
            self._send('Play')

    def previous(self) -> None:
        self._send('Previous')

    def next(self) -> None:
        self._send('Next')

    def seek(self, position_ms: int) -> None:
        """Jump to ``position_ms`` in the current track."""
        if self._connection is None:
            return
        try:
            metadata = self._connection.get_property('Metadata')
            track_id = metadata.get('mpris:trackid')
        except (TransportError, AttributeError) as e:
            logger.debug("Seek dropped, no track id: %s", e)
            return
        if not track_id:
            logger.debug("Seek dropped, player reports no track id")
            return
        self._send('SetPosition', track_id, ms_to_us(position_ms))

"""Media controls: discovery, selection and polling of MPRIS players.

Everything runs on the GLib main loop. A periodic timer drives polling and
player reconsideration, and the transport delivers registration
notifications on the same loop, so handlers never overlap and no locking
is needed.
"""

from typing import List, NamedTuple, Optional

import gi
gi.require_version('GLib', '2.0')
from gi.repository import GLib

from mpris_controls.config import DEFAULT_UPDATE_INTERVAL_MS
from mpris_controls.events import EventBus
from mpris_controls.logging import get_logger
from mpris_controls.names import DisplayNameResolver
from mpris_controls.protocol import Transport
from mpris_controls.registry import PlayerRegistry
from mpris_controls.selector import PlayerSelector
from mpris_controls.session import SessionController
from mpris_controls.state import PlaybackState, StateModel, seek_target_ms

logger = get_logger(__name__)

NO_PLAYER_LABEL = "No player"


class PlayerEntry(NamedTuple):
    """One row of a player selection menu."""

    service: str
    display_name: str
    is_active: bool


class MediaControls:
    """Publishes the active player's state and accepts playback intents."""

    def __init__(
        self,
        transport: Transport,
        event_bus: Optional[EventBus] = None,
        update_interval_ms: int = DEFAULT_UPDATE_INTERVAL_MS,
        auto_switch: bool = True,
    ):
        """
        Initialize media controls.

        Args:
            transport: Session-bus transport
            event_bus: Bus for state notifications and intents (optional)
            update_interval_ms: Poll interval for the active player
            auto_switch: Let a player that starts playing take over
        """
        self._transport = transport
        self._events = event_bus
        self._update_interval_ms = update_interval_ms
        self._auto_switch = auto_switch

        self.registry = PlayerRegistry(transport)
        self.selector = PlayerSelector(transport)
        self.session = SessionController(transport)
        self.names = DisplayNameResolver(transport)

        self._timer_id: Optional[int] = None
        self._last_state = StateModel()
        self._last_player = ""

        if self._events is not None:
            self._events.subscribe(EventBus.ACTION_PLAY_PAUSE, lambda _data: self.play_pause())
            self._events.subscribe(EventBus.ACTION_PREV, lambda _data: self.previous())
            self._events.subscribe(EventBus.ACTION_NEXT, lambda _data: self.next())
            self._events.subscribe(EventBus.ACTION_SEEK_PERCENT, self._on_seek_action)
            self._events.subscribe(EventBus.ACTION_SELECT_PLAYER, self._on_select_action)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Discover players, connect to the best one and start polling."""
        self._transport.subscribe(self.on_player_registered, self.on_player_unregistered)
        self._rescan()
        if len(self.registry):
            self.connect_best()
        self._timer_id = GLib.timeout_add(self._update_interval_ms, self._on_timer)
        self._publish_state()

    def stop(self) -> None:
        if self._timer_id is not None:
            GLib.source_remove(self._timer_id)
            self._timer_id = None
        self._transport.close()
        self.session.disconnect()
        self._publish_state()

    def _on_timer(self) -> bool:
        self.tick()
        return GLib.SOURCE_CONTINUE

    def tick(self) -> None:
        """One polling cycle."""
        self._rescan()

        active = self.session.active_player
        if active and active not in self.registry:
            logger.info("Active player %s is gone", active)
            self.session.disconnect()
            active = ""
        # A fresh connection has already been polled
        connected_now = False
        if not active and len(self.registry):
            connected_now = self.connect_best()

        if self.session.is_connected:
            if not connected_now:
                self.session.poll()
            self.check_for_better_player()

        self._publish_state()

    # ------------------------------------------------------------------
    # Player management
    # ------------------------------------------------------------------
    def _rescan(self) -> None:
        previous = self.registry.players
        if self.registry.rescan() != previous:
            self.names.retain(self.registry)
            self._publish_players()

    def connect_best(self) -> bool:
        """Connect to the best available player."""
        best = self.selector.select_best(self.registry)
        if best is None:
            return False
        return self._connect(best)

    def _connect(self, service: str) -> bool:
        connected = self.session.connect(service)
        self._publish_players()
        return connected

    def check_for_better_player(self) -> bool:
        """
        Switch to a peer that started playing while ours is not.

        Returns:
            True if the active player changed
        """
        if not self._auto_switch or len(self.registry) < 2:
            return False
        if self.session.current_state().playback_state is PlaybackState.PLAYING:
            return False

        active = self.session.active_player
        better = self.selector.find_takeover(self.registry, active)
        if better is None:
            return False
        logger.info("Switching from %s to %s (now playing)", active or "none", better)
        return self._connect(better)

    def on_player_registered(self, service: str) -> None:
        self.registry.on_registered(service)
        self.names.retain(self.registry)
        if not self.session.is_connected and len(self.registry):
            self.connect_best()
        self._publish_players()
        self._publish_state()

    def on_player_unregistered(self, service: str) -> None:
        if service == self.session.active_player:
            self.session.disconnect()
            self.registry.on_unregistered(service)
            if len(self.registry):
                self.connect_best()
        else:
            self.registry.on_unregistered(service)
        self.names.retain(self.registry)
        self._publish_players()
        self._publish_state()

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------
    def current_state(self) -> StateModel:
        return self.session.current_state()

    @property
    def controls_enabled(self) -> bool:
        return self.session.is_connected

    def display_name(self, service: str) -> str:
        return self.names.resolve(service)

    def label(self) -> str:
        """Tooltip text for the controls."""
        state = self.session.current_state()
        if not state.player:
            return NO_PLAYER_LABEL
        if state.title:
            if state.artist:
                return f"{state.title} - {state.artist}"
            return state.title
        return self.display_name(state.player)

    def candidates(self) -> List[PlayerEntry]:
        """Players for a selection menu, in discovery order."""
        active = self.session.active_player
        return [
            PlayerEntry(service, self.display_name(service), service == active)
            for service in self.registry
        ]

    def _publish_players(self) -> None:
        if self._events is None:
            return
        self._events.publish(EventBus.PLAYERS_CHANGED, {"players": self.candidates()})

    def _publish_state(self) -> None:
        if self._events is None:
            return
        state = self.session.current_state()
        if state.player != self._last_player:
            self._last_player = state.player
            self._events.publish(EventBus.ACTIVE_PLAYER_CHANGED, {"player": state.player})
        if state != self._last_state:
            self._last_state = state
            self._events.publish(EventBus.STATE_CHANGED, {"state": state.copy()})

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------
    def play_pause(self) -> None:
        self.session.play_pause()

    def previous(self) -> None:
        self.session.previous()

    def next(self) -> None:
        self.session.next()

    def select_player(self, service: str) -> bool:
        """Make ``service`` the active player."""
        if service not in self.registry:
            logger.warning("Ignoring selection of unknown player %s", service)
            return False
        connected = self._connect(service)
        self._publish_state()
        return connected

    def seek_percent(self, percent: int) -> None:
        """Seek to ``percent`` (0..100) of the current track."""
        state = self.session.current_state()
        if not state.has_position:
            return
        percent = min(max(int(percent), 0), 100)
        self.session.seek(seek_target_ms(percent, state.duration_ms))

    def _on_seek_action(self, data) -> None:
        self.seek_percent(data["percent"])

    def _on_select_action(self, data) -> None:
        self.select_player(data["player"])

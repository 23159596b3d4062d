"""Centralized event bus between the controller and its presentation layer."""

from typing import Any, Callable, Dict, List

from mpris_controls.logging import get_logger

logger = get_logger(__name__)


class EventBus:
    """Publish-subscribe event system. Components publish/subscribe without knowing each other.

    Event Flow Architecture:
    - Presentation layers (icon, menu, input) publish ACTION_* events (intents)
    - MediaControls publishes *_CHANGED events (notifications)
    - The core never reaches into a concrete UI object
    """

    # =========================================================================
    # Core -> UI: State Change Notifications
    # Published by MediaControls
    # =========================================================================

    # {"state": StateModel}, only when the snapshot differs from the last one
    STATE_CHANGED = "media.state_changed"
    # {"players": [PlayerEntry, ...]} in registry order
    PLAYERS_CHANGED = "media.players_changed"
    # {"player": str}, "" when no session is active
    ACTIVE_PLAYER_CHANGED = "media.active_player_changed"

    # =========================================================================
    # UI -> Core: Intents
    # =========================================================================

    ACTION_PLAY_PAUSE = "action.play_pause"
    ACTION_PREV = "action.previous"
    ACTION_NEXT = "action.next"
    # {"percent": int} in 0..100
    ACTION_SEEK_PERCENT = "action.seek_percent"
    # {"player": str}
    ACTION_SELECT_PLAYER = "action.select_player"

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        if event not in self._subscribers:
            self._subscribers[event] = []
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: Callable[[Any], None]) -> None:
        if event in self._subscribers:
            try:
                self._subscribers[event].remove(callback)
            except ValueError:
                pass

    def publish(self, event: str, data: Any = None) -> None:
        # Copy so a callback may unsubscribe itself while we iterate
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback(data)
            except Exception as e:
                logger.error(
                    "Error in event callback for %s: %s", event, e, exc_info=True
                )

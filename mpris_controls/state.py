"""Normalized, presentation-agnostic player state and the wire-value mapping."""

from enum import Enum
from typing import Any, Dict, Mapping

NO_MEDIA_TEXT = "No media playing"


class PlaybackState(Enum):
    """Playback status of a player session."""

    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"

    @classmethod
    def from_wire(cls, status: Any) -> "PlaybackState":
        """Map an MPRIS PlaybackStatus string; anything unknown counts as stopped."""
        if status == "Playing":
            return cls.PLAYING
        if status == "Paused":
            return cls.PAUSED
        return cls.STOPPED

    @property
    def icon_name(self) -> str:
        """Freedesktop icon a renderer would show for this state."""
        return _ICON_NAMES[self]


_ICON_NAMES = {
    PlaybackState.PLAYING: "media-playback-start",
    PlaybackState.PAUSED: "media-playback-pause",
    PlaybackState.STOPPED: "media-playback-stop",
}


def us_to_ms(value: Any) -> int:
    """Convert wire microseconds to milliseconds, truncating toward zero."""
    us = int(value)
    ms = abs(us) // 1000
    return ms if us >= 0 else -ms


def ms_to_us(value: int) -> int:
    """Convert milliseconds to wire microseconds."""
    return int(value) * 1000


def seek_target_ms(percent: int, duration_ms: int) -> int:
    """Position for a 0..100 slider value: floor(percent * duration / 100)."""
    return (int(percent) * int(duration_ms)) // 100


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _artists(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return ", ".join(str(artist) for artist in value)
    except TypeError:
        return str(value)


def parse_metadata(metadata: Any) -> Dict[str, Any]:
    """
    Map an MPRIS Metadata dictionary to StateModel fields.

    Args:
        metadata: The ``a{sv}`` value read from the player

    Returns:
        Dict with ``title``, ``artist``, ``album`` and ``duration_ms``

    Raises:
        ValueError: If the value is not a key/value map
    """
    if not isinstance(metadata, Mapping):
        raise ValueError(f"Metadata is not a mapping: {type(metadata).__name__}")

    try:
        duration_ms = max(us_to_ms(metadata.get("mpris:length", 0)), 0)
    except (TypeError, ValueError):
        duration_ms = 0

    return {
        "title": _text(metadata.get("xesam:title")),
        "artist": _artists(metadata.get("xesam:artist")),
        "album": _text(metadata.get("xesam:album")),
        "duration_ms": duration_ms,
    }


class StateModel:
    """
    Snapshot of the active session as seen by the last poll.

    An empty ``player`` means no session is active, and then every other
    field holds its default. Only the SessionController mutates a model;
    consumers get copies.
    """

    def __init__(self):
        self.clear()

    def clear(self) -> None:
        """Reset every field to the empty invariant."""
        self.player: str = ""
        self.title: str = ""
        self.artist: str = ""
        self.album: str = ""
        self.duration_ms: int = 0
        self.position_ms: int = 0
        self.has_position: bool = False
        self.playback_state: PlaybackState = PlaybackState.STOPPED

    def copy(self) -> "StateModel":
        snapshot = StateModel()
        snapshot.__dict__.update(self.__dict__)
        return snapshot

    @property
    def is_empty(self) -> bool:
        return self == StateModel()

    @property
    def position_percent(self) -> int:
        """Slider position 0..100, 0 when the duration is unknown."""
        if self.duration_ms <= 0:
            return 0
        return min(max(self.position_ms * 100 // self.duration_ms, 0), 100)

    @property
    def track_info(self) -> str:
        """Two-line track description for a menu header."""
        if not self.title:
            return NO_MEDIA_TEXT
        if self.artist:
            return f"{self.title}\n{self.artist}"
        return self.title

    @property
    def play_pause_label(self) -> str:
        return "Pause" if self.playback_state is PlaybackState.PLAYING else "Play"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateModel):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self):
        return (f"StateModel(player={self.player!r}, state={self.playback_state.value}, "
                f"title={self.title!r}, artist={self.artist!r}, "
                f"position={self.position_ms}/{self.duration_ms}ms)")

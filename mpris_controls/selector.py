"""Best-player selection policy.

The policy is a greedy single pass over the candidates in discovery order:
Playing beats Paused beats Stopped, unreachable players are skipped, and
among equals the earlier-discovered player wins. Only a peer that is
Playing may take over an active session, which keeps the choice from
oscillating between two idle players.
"""

from typing import Iterable, Optional

from mpris_controls.exceptions import TransportError
from mpris_controls.logging import get_logger
from mpris_controls.protocol import MPRIS2_PLAYER_INTERFACE, Transport
from mpris_controls.state import PlaybackState

logger = get_logger(__name__)

_PRIORITY = {
    PlaybackState.PLAYING: 2,
    PlaybackState.PAUSED: 1,
    PlaybackState.STOPPED: 0,
}


class PlayerSelector:
    """Decides which player session should be the active target."""

    def __init__(self, transport: Transport):
        self._transport = transport

    def probe(self, service: str) -> Optional[PlaybackState]:
        """
        Query a session's playback state without binding to it.

        Returns:
            The state, or None if the player could not be queried
        """
        try:
            status = self._transport.get_property(
                service, MPRIS2_PLAYER_INTERFACE, 'PlaybackStatus'
            )
        except TransportError as e:
            logger.debug("Probe of %s failed: %s", service, e)
            return None
        return PlaybackState.from_wire(status)

    def select_best(self, candidates: Iterable[str]) -> Optional[str]:
        """
        Pick the session to control.

        Args:
            candidates: Player sessions in discovery order

        Returns:
            The chosen session, or None if there is nothing reachable
        """
        candidates = list(candidates)
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        best: Optional[str] = None
        best_state: Optional[PlaybackState] = None
        for service in candidates:
            state = self.probe(service)
            if state is None:
                continue
            if state is PlaybackState.PLAYING:
                logger.debug("Selected %s (playing)", service)
                return service
            if best_state is None or _PRIORITY[state] > _PRIORITY[best_state]:
                best, best_state = service, state

        if best is not None:
            logger.debug("Selected %s (%s)", best, best_state.value.lower())
        return best

    def find_takeover(self, candidates: Iterable[str], active: str) -> Optional[str]:
        """
        Look for a peer of ``active`` that has started playing.

        Returns:
            The first other session found Playing, or None
        """
        for service in candidates:
            if service == active:
                continue
            if self.probe(service) is PlaybackState.PLAYING:
                return service
        return None

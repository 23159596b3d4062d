"""Custom exception hierarchy for the media controls.

This module provides a structured exception hierarchy for consistent
error handling across the controller and its transports.
"""

from typing import Optional


class MediaControlsError(Exception):
    """Base exception for all media controls errors."""

    pass


class TransportError(MediaControlsError):
    """Errors raised by a session-bus transport call."""

    def __init__(self, message: str, error_name: Optional[str] = None):
        super().__init__(message)
        self.error_name = error_name


class BindError(TransportError):
    """A player session could not be bound for persistent control."""

    pass


class ConfigurationError(MediaControlsError):
    """Errors related to configuration."""

    pass

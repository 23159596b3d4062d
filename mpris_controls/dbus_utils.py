"""D-Bus utility functions for error handling."""

from functools import wraps
from typing import Callable, Type

import dbus

from mpris_controls.exceptions import TransportError


def dbus_error_name(e: Exception) -> str:
    """Return the D-Bus error name of ``e``, or its message if it has none."""
    name = e.get_dbus_name() if hasattr(e, 'get_dbus_name') else None
    return name or str(e)


def translate_dbus_errors(error_class: Type[TransportError] = TransportError) -> Callable:
    """
    Decorator turning dbus-python exceptions into our own hierarchy.

    Args:
        error_class: TransportError subclass to raise
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except dbus.exceptions.DBusException as e:
                raise error_class(str(e), error_name=dbus_error_name(e)) from e
        return wrapper
    return decorator

#!/usr/bin/env python3
"""MPRIS media controls - headless entry point.

Follows the active media player and prints its label whenever it changes.
"""

import signal
import sys

import gi
gi.require_version('GLib', '2.0')
from gi.repository import GLib

from mpris_controls.config import get_config
from mpris_controls.dbus_transport import DBusTransport
from mpris_controls.events import EventBus
from mpris_controls.exceptions import ConfigurationError, TransportError
from mpris_controls.logging import LinuxLogger, get_logger
from mpris_controls.media_controls import MediaControls

logger = get_logger(__name__)


def main():
    """Main entry point."""
    # Initialize config (creates directories, loads settings)
    config = get_config()
    LinuxLogger(log_dir=config.log_dir)

    try:
        update_interval = config.update_interval_ms
        timeout = config.dbus_timeout
        auto_switch = config.auto_switch
    except ConfigurationError as e:
        logger.error("Invalid configuration in %s: %s", config.config_file, e)
        return 1

    try:
        transport = DBusTransport(timeout=timeout)
    except TransportError as e:
        logger.error("Cannot connect to the session bus: %s", e)
        return 1

    event_bus = EventBus()
    controls = MediaControls(
        transport,
        event_bus=event_bus,
        update_interval_ms=update_interval,
        auto_switch=auto_switch,
    )
    event_bus.subscribe(EventBus.STATE_CHANGED, lambda _data: print(controls.label(), flush=True))

    loop = GLib.MainLoop()

    def _quit():
        loop.quit()
        return GLib.SOURCE_REMOVE

    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGINT, _quit)
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGTERM, _quit)

    controls.start()
    try:
        loop.run()
    finally:
        controls.stop()
    return 0


if __name__ == '__main__':
    sys.exit(main())

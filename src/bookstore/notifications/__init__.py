"""Broadcast adapter registry.

Provides singleton access to the broadcast channel. The in-memory adapter is
the default; a socket server adapter can be plugged in with set_broadcaster().
"""

from bookstore.notifications.broadcast_port import BroadcastPort

_broadcaster: BroadcastPort | None = None


def get_broadcaster() -> BroadcastPort:
    """Return the configured broadcaster (singleton)."""
    global _broadcaster
    if _broadcaster is None:
        from bookstore.notifications.memory_broadcast import InMemoryBroadcaster

        _broadcaster = InMemoryBroadcaster()
    return _broadcaster


def set_broadcaster(broadcaster: BroadcastPort) -> None:
    global _broadcaster
    _broadcaster = broadcaster


def reset_broadcaster():
    """Reset the broadcaster singleton (useful for testing)."""
    global _broadcaster
    _broadcaster = None

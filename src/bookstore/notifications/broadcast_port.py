"""Broadcast channel port — pushes live events to connected admin dashboards."""

from abc import ABC, abstractmethod


class BroadcastPort(ABC):
    """Abstract interface for real-time broadcast adapters."""

    @abstractmethod
    def publish(self, topic: str, payload: dict) -> dict:
        """Publish ``payload`` on ``topic``.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

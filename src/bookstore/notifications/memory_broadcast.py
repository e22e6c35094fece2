"""In-memory broadcaster — records published events for tests and local runs."""

import threading
from uuid import uuid4

from bookstore.notifications.broadcast_port import BroadcastPort


class InMemoryBroadcaster(BroadcastPort):
    def __init__(self):
        self.published: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Broadcast channel unavailable"
        self._lock = threading.Lock()

    def configure(self, should_succeed: bool = True, failure_reason: str = "Broadcast channel unavailable"):
        """Make the next publishes raise, as a dropped socket server would."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def publish(self, topic: str, payload: dict) -> dict:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        message_id = f"bcast-{uuid4().hex[:12]}"
        with self._lock:
            self.published.append({"message_id": message_id, "topic": topic, "payload": payload})
        return {"message_id": message_id, "status": "sent"}

    def on_topic(self, topic: str) -> list[dict]:
        with self._lock:
            return [event["payload"] for event in self.published if event["topic"] == topic]

    def reset(self):
        with self._lock:
            self.published.clear()
        self.should_succeed = True
        self.failure_reason = "Broadcast channel unavailable"

"""Per-key in-process locks.

Used to serialize work on the same cart (keyed by identity) and on the same
book's stock (keyed by book id). Locks for several keys are always taken in
sorted order so two holders can never wait on each other.

A key's lock lives only while someone holds or waits for it, so the registry
stays as small as the number of keys in use.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """A registry of ``threading.Lock`` objects, one per key in use."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _enter(self, key: str) -> _Slot:
        # Counted before acquiring, so waiters keep the slot alive.
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
            return slot

    def _leave(self, key: str, slot: _Slot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0:
                del self._slots[key]

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        ordered = sorted({str(k) for k in keys})
        acquired: list[tuple[str, _Slot]] = []
        try:
            for key in ordered:
                slot = self._enter(key)
                try:
                    slot.lock.acquire()
                except BaseException:
                    self._leave(key, slot)
                    raise
                acquired.append((key, slot))
            yield
        finally:
            for key, slot in reversed(acquired):
                slot.lock.release()
                self._leave(key, slot)

    def is_held(self, key: str) -> bool:
        with self._guard:
            slot = self._slots.get(str(key))
            return slot is not None and slot.lock.locked()

"""Identifier generation for connections, clusters and alerts."""

import itertools
import threading
import uuid
from typing import Protocol


class IdProvider(Protocol):
    """Produces unique identifiers for a given prefix."""

    def next_id(self, prefix: str) -> str: ...


class UuidIdProvider:
    """Collision-resistant random identifiers (``conn_<hex>``)."""

    def next_id(self, prefix: str) -> str:
        return f"{prefix}_{uuid.uuid4().hex}"


class SequentialIdProvider:
    """Monotonic counter identifiers (``conn_1``, ``conn_2``, ...), one counter per prefix."""

    def __init__(self, start: int = 1) -> None:
        self._start = start
        self._counters: dict[str, itertools.count] = {}
        self._lock = threading.Lock()

    def next_id(self, prefix: str) -> str:
        with self._lock:
            counter = self._counters.setdefault(prefix, itertools.count(self._start))
            return f"{prefix}_{next(counter)}"

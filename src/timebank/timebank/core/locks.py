from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class EmployerLocks:
    """One mutex per employer id.

    Cycle detection reads config, sums a range and writes config back, so every
    mutating operation for an employer runs under that employer's lock.
    Different employers never contend.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}

    def _lock_for(self, employer_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(int(employer_id))
            if lock is None:
                lock = threading.RLock()
                self._locks[int(employer_id)] = lock
            return lock

    @contextmanager
    def hold(self, employer_id: int) -> Iterator[None]:
        lock = self._lock_for(employer_id)
        with lock:
            yield

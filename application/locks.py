from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class PlayerLocks:
    """
    One exclusive lock per player ID.

    Spins for the same player run one after another, so two concurrent
    spins can never both read the same pre-spin balance. Spins for
    different players do not block each other.

    A lock only exists while someone holds or waits for it, so the table
    stays as small as the number of players spinning right now.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # player id -> [lock, number of holders and waiters]
        self._locks: Dict[str, List] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, player_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(player_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[player_id]

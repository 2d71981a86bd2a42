from __future__ import annotations

from typing import Dict, Optional, Tuple


class SpinReplays:
    """
    Spin messages that can be replayed by reacting to them.

    Only a player's latest spin message is replayable: tracking a new one
    forgets the previous one, so there is at most one entry per player.
    """

    def __init__(self) -> None:
        # message id -> (player discord id, machine id, bet)
        self._by_message: Dict[int, Tuple[int, str, int]] = {}
        # player discord id -> message id
        self._latest: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._by_message)

    def track(self, message_id: int, user_id: int, machine_id: str, bet: int) -> None:
        previous = self._latest.pop(user_id, None)
        if previous is not None:
            self._by_message.pop(previous, None)

        self._by_message[message_id] = (user_id, machine_id, bet)
        self._latest[user_id] = message_id

    def take(self, message_id: int, user_id: int) -> Optional[Tuple[str, int]]:
        """
        Claim the spin on `message_id` for `user_id`.

        Returns (machine_id, bet), or None if the message is not replayable
        or belongs to another player.
        """

        entry = self._by_message.get(message_id)
        if entry is None or entry[0] != user_id:
            return None

        del self._by_message[message_id]
        self._latest.pop(user_id, None)
        return entry[1], entry[2]

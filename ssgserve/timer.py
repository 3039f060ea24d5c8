"""Hashed timing wheel for connection timeouts."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any


@dataclass(eq=False)
class TimerNode:
    """A pending timeout for ``conn``; compared by identity."""

    conn: Any
    expiration: int
    slot_index: int


class TimerWheel:
    """A ring of slots advanced one slot per tick."""

    def __init__(self, num_slots: int, slot_interval: int) -> None:
        if num_slots <= 0:
            raise ValueError("num_slots must be positive")
        if slot_interval <= 0:
            raise ValueError("slot_interval must be positive")
        self.num_slots = num_slots
        self.slot_interval = slot_interval
        self.current_slot = 0
        self._slots: list[dict[TimerNode, None]] = [{} for _ in range(num_slots)]

    def __len__(self) -> int:
        return sum(len(slot) for slot in self._slots)

    def add(self, conn: Any, timeout_sec: int) -> TimerNode:
        """Schedule ``conn`` to expire after ``timeout_sec`` seconds."""
        if timeout_sec < 0:
            raise ValueError("timeout_sec must not be negative")
        ticks = max(timeout_sec // self.slot_interval, 1)
        target = (self.current_slot + ticks) % self.num_slots
        node = TimerNode(conn, int(time.time()) + timeout_sec, target)
        self._slots[target][node] = None
        return node

    def remove(self, node: TimerNode | None) -> None:
        """Cancel ``node``; removing an already expired node does nothing."""
        if node is not None:
            self._slots[node.slot_index].pop(node, None)

    def tick(self) -> list[TimerNode]:
        """Advance one slot and return its nodes, most recently added first."""
        self.current_slot = (self.current_slot + 1) % self.num_slots
        expired = list(reversed(self._slots[self.current_slot]))
        self._slots[self.current_slot] = {}
        return expired

    def clear(self) -> None:
        """Drop every pending node."""
        for slot in self._slots:
            slot.clear()
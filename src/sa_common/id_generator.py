"""Prefixed, time-ordered IDs for sessions, bids and history records.

    las_<n>    live auction session
    bid_<n>    bid entry
    hist_<n>   auction-history record without a session id

The numeric part packs (ms since 2025-01-01 | node | sequence), so ids issued
by one process sort by creation time and never repeat after a restart.
"""

import threading
import time

_EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
_NODE_BITS = 10
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


def _now_ms() -> int:
    return int(time.time() * 1000)


class IdGenerator:
    def __init__(self, node_id: int = 0) -> None:
        if not 0 <= node_id < (1 << _NODE_BITS):
            raise ValueError(f"node_id must be 0-{(1 << _NODE_BITS) - 1}, got {node_id}")
        self._node_id = node_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            # A clock stepping backwards keeps issuing from the last timestamp
            ts = max(_now_ms(), self._last_ms)
            if ts == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while ts <= self._last_ms:
                        ts = _now_ms()
            else:
                self._sequence = 0
            self._last_ms = ts
            return (
                (ts - _EPOCH_MS) << (_NODE_BITS + _SEQUENCE_BITS)
                | self._node_id << _SEQUENCE_BITS
                | self._sequence
            )

    def next_id(self, prefix: str = "") -> str:
        return f"{prefix}{self.next_int()}"


_default = IdGenerator()


def generate_id(prefix: str = "") -> str:
    return _default.next_id(prefix)

"""Send quota limiting the number of QoS 1/2 PUBLISH packets in flight.

Each time a QoS 1/2 PUBLISH is to be sent a slot is acquired, blocking until
one is available; the slot is released when the message is fully
acknowledged. As the MQTT specification requires, the quota is never raised
above its initial value: such a release is reported with
:class:`UnexpectedReleaseError` and otherwise ignored.
"""

from __future__ import annotations

import threading
from collections import deque


class UnexpectedReleaseError(Exception):
    """Raised when a slot is released while the quota is at its initial value."""

    def __init__(self, message: str = "release called when quota at initial value") -> None:
        super().__init__(message)


class SendQuota:
    """Bounds the number of messages in flight, serving waiters in FIFO order."""

    def __init__(self, quota: int) -> None:
        if quota < 0:
            raise ValueError("quota must not be negative")
        self._lock = threading.Lock()
        self._initial = quota
        self._quota = quota
        self._waiters: deque[threading.Event] = deque()

    @property
    def quota(self) -> int:
        """Slots currently free (negative after retransmissions over the limit)."""
        with self._lock:
            return self._quota

    @property
    def waiting(self) -> int:
        """Number of callers blocked in :meth:`acquire`."""
        with self._lock:
            return len(self._waiters)

    def retransmit(self) -> None:
        """Take a slot for a redelivered message without ever blocking.

        The quota may go below zero as a result.
        """
        with self._lock:
            self._quota -= 1

    def acquire(self, timeout: float | None = None) -> None:
        """Wait for a free slot.

        A free slot is taken immediately even when ``timeout`` is zero. If no
        slot becomes available within ``timeout`` seconds, ``TimeoutError`` is
        raised and the caller leaves the queue. ``None`` waits indefinitely.
        """
        with self._lock:
            if self._quota > 0 and not self._waiters:
                self._quota -= 1
                return
            ready = threading.Event()
            self._waiters.append(ready)

        if ready.wait(timeout):
            return  # the releaser has already accounted for this slot

        with self._lock:
            if ready.is_set():
                # Granted just as we gave up: keep the slot rather than repair the queue.
                return
            self._waiters.remove(ready)
        raise TimeoutError("timed out waiting for a send quota slot")

    def release(self) -> None:
        """Free a slot, handing it to the longest waiting caller if there is one."""
        with self._lock:
            if self._quota >= 0 and self._waiters:
                self._waiters.popleft().set()
                return
            if self._quota < self._initial:
                self._quota += 1
                return
        raise UnexpectedReleaseError()
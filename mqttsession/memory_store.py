"""Session state store that keeps packets in memory."""

from __future__ import annotations

import io
import threading
from dataclasses import dataclass
from typing import BinaryIO, Union

from mqttsession.interfaces import Packet

PacketData = Union[bytes, bytearray, memoryview, Packet]


class NotInStoreError(LookupError):
    """Raised when the requested packet identifier is not in the store."""

    def __init__(self, message: str = "the requested ID was not found in the store") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class _Entry:
    sequence: int  # insertion counter, used to keep the order of puts
    payload: bytes


def _encode(data: PacketData) -> bytes:
    """Return the bytes of ``data``, encoding it first if it is a packet."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    buffer = io.BytesIO()
    data.write_to(buffer)
    return buffer.getvalue()


class MemoryStore:
    """Stores encoded packets in memory, remembering the order they were put."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[int, _Entry] = {}
        self._sequence = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def put(self, packet_id: int, packet_type: int, data: PacketData) -> None:
        """Store ``data`` (bytes or a packet) under ``packet_id``."""
        payload = _encode(data)
        with self._lock:
            self._data[packet_id] = _Entry(self._sequence, payload)
            self._sequence += 1

    def get(self, packet_id: int) -> BinaryIO:
        """Return a stream holding the stored packet."""
        with self._lock:
            entry = self._data.get(packet_id)
        if entry is None:
            raise NotInStoreError()
        return io.BytesIO(entry.payload)

    def delete(self, packet_id: int) -> None:
        """Remove the packet stored under ``packet_id``."""
        with self._lock:
            try:
                del self._data[packet_id]
            except KeyError:
                raise NotInStoreError(
                    f"request to delete packet {packet_id}; packet not found"
                ) from None

    def quarantine(self, packet_id: int) -> None:
        """Discard a corrupt packet; nothing better can be done in memory."""
        self.delete(packet_id)

    def list(self) -> list[int]:
        """Return the stored packet identifiers in the order they were put."""
        with self._lock:
            ordered = sorted(self._data.items(), key=lambda item: item[1].sequence)
        return [packet_id for packet_id, _ in ordered]

    def reset(self) -> None:
        """Remove every stored packet."""
        with self._lock:
            self._data = {}
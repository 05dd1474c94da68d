"""Interfaces and errors shared by the session state and its stores."""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable


class SessionError(Exception):
    """Base class for session state errors."""


class NoConnectionError(SessionError):
    """Raised when no connection is available.

    The session is not between a CONNACK being received and the connection
    being lost.
    """

    def __init__(self, message: str = "no connection available") -> None:
        super().__init__(message)


class PacketIdentifiersExhaustedError(SessionError):
    """Raised when every packet identifier is already in use."""

    def __init__(self, message: str = "all packet identifiers in use") -> None:
        super().__init__(message)


@runtime_checkable
class Packet(Protocol):
    """A packet that can be sent with a packet identifier."""

    def set_identifier(self, packet_id: int) -> None:
        """Set the packet identifier."""

    def packet_type(self) -> int:
        """Return the MQTT control packet type."""

    def write_to(self, stream: BinaryIO) -> int:
        """Write the encoded packet to ``stream`` and return the byte count."""


@runtime_checkable
class Storer(Protocol):
    """Persistent storage for packets that form part of the session state."""

    def put(self, packet_id: int, packet_type: int, data: bytes) -> None:
        """Store the encoded packet under ``packet_id``, replacing any earlier one."""

    def get(self, packet_id: int) -> BinaryIO:
        """Return a readable binary stream holding the stored packet.

        The caller must close the stream.
        """

    def delete(self, packet_id: int) -> None:
        """Remove the packet stored under ``packet_id``."""

    def quarantine(self, packet_id: int) -> None:
        """Move a corrupt packet out of the way (or delete it)."""

    def list(self) -> list[int]:
        """Return the stored packet identifiers in the order they were put."""

    def reset(self) -> None:
        """Remove every stored packet."""
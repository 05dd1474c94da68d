"""Session state store that keeps each packet in its own file."""

from __future__ import annotations

import fnmatch
import io
import os
import re
import tempfile
import threading
from typing import BinaryIO, Union

from mqttsession.interfaces import Packet

PacketData = Union[bytes, bytearray, memoryview, Packet]

_TMP_EXTENSION = ".tmp"
CORRUPT_EXTENSION = ".CORRUPT"  # quarantined files are given this extension
_ID_PATTERN = re.compile(r"[+-]?[0-9]+", re.ASCII)


class FileStoreError(Exception):
    """Raised when the file store cannot complete an operation."""


def _write(stream: BinaryIO, data: PacketData) -> None:
    if isinstance(data, (bytes, bytearray, memoryview)):
        stream.write(data)
    else:
        data.write_to(stream)


class FileStore:
    """Stores packets on disk, one file per packet identifier.

    Order is kept through file modification times, so packets put closer
    together than the file system's timestamp resolution may be listed in
    either order.
    """

    def __init__(self, path: str | os.PathLike[str], prefix: str, extension: str) -> None:
        if extension and not extension.startswith("."):
            extension = "." + extension
        path = os.fspath(path)
        try:
            os.stat(path)
        except OSError as err:
            raise FileStoreError(f"stat on folder failed: {err}") from err

        # Fail fast: check that a file can be written, read and removed here.
        test_file = os.path.join(path, prefix + "TEST" + extension)
        try:
            with open(test_file, "wb") as f:
                f.write(b"test")
        except OSError as err:
            raise FileStoreError(f"failed to write test file to specified folder: {err}") from err
        try:
            with open(test_file, "rb") as f:
                f.read()
        except OSError as err:
            raise FileStoreError(f"failed to read test file from specified folder: {err}") from err
        try:
            os.remove(test_file)
        except OSError as err:
            raise FileStoreError(f"failed to remove test file from specified folder: {err}") from err

        self._lock = threading.Lock()
        self._path = path
        self._prefix = prefix
        self._extension = extension

    def __str__(self) -> str:
        return f"store path: {self._path}, prefix: {self._prefix}, extension: {self._extension}"

    def put(self, packet_id: int, packet_type: int, data: PacketData) -> None:
        """Store the packet, writing via a temporary file to avoid partial files."""
        with self._lock:
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._path,
                    prefix=self._file_name_prefix(packet_id) + "-",
                    suffix=self._extension + _TMP_EXTENSION,
                )
            except OSError as err:
                raise FileStoreError(f"failed to create temp file: {err}") from err
            try:
                with os.fdopen(fd, "wb") as f:
                    _write(f, data)
                    f.flush()
                    os.fsync(f.fileno())  # keep timestamps as accurate as possible
            except Exception as err:
                _remove_quietly(tmp_name)
                raise FileStoreError(f"failed to write packet to temp file: {err}") from err
            try:
                os.replace(tmp_name, self._file_path(packet_id))
            except OSError as err:
                _remove_quietly(tmp_name)
                raise FileStoreError(f"failed to rename temp file: {err}") from err

    def get(self, packet_id: int) -> BinaryIO:
        """Open the stored packet for reading; the caller must close it."""
        with self._lock:
            try:
                return open(self._file_path(packet_id), "rb")
            except OSError as err:
                raise FileStoreError(f"failed to open packet file: {err}") from err

    def delete(self, packet_id: int) -> None:
        """Remove the file holding ``packet_id``."""
        with self._lock:
            self._delete(packet_id)

    def quarantine(self, packet_id: int) -> None:
        """Move a corrupt packet aside with a ``.CORRUPT`` extension.

        If that fails, the packet is deleted so it is not resent on every
        reconnection, and the failure is raised.
        """
        with self._lock:
            try:
                fd, target = tempfile.mkstemp(
                    dir=self._path,
                    prefix=self._file_name_prefix(packet_id) + "-",
                    suffix=self._extension + CORRUPT_EXTENSION,
                )
            except OSError as err:
                self._delete_quietly(packet_id)
                raise FileStoreError(f"failed to create quarantine file: {err}") from err
            try:
                os.close(fd)
            except OSError as err:
                self._delete_quietly(packet_id)
                raise FileStoreError(
                    f"failed to close newly created quarantine file: {err}"
                ) from err
            try:
                os.replace(self._file_path(packet_id), target)
            except OSError as err:
                self._delete_quietly(packet_id)
                raise FileStoreError(f"failed to move packet into quarantine: {err}") from err

    def list(self) -> list[int]:
        """Return the stored packet identifiers in the order they were put."""
        with self._lock:
            return self._list()

    def reset(self) -> None:
        """Delete every stored packet, raising the last failure if any."""
        with self._lock:
            last_error: FileStoreError | None = None
            for packet_id in self._list():
                try:
                    self._delete(packet_id)
                except FileStoreError as err:
                    last_error = err
            if last_error is not None:
                raise last_error

    def _list(self) -> list[int]:
        pattern = self._prefix + "*" + self._extension
        found: list[tuple[int, int]] = []
        try:
            entries = list(os.scandir(self._path))
        except OSError as err:
            raise FileStoreError(f"failed to read dir: {err}") from err
        for entry in entries:
            if entry.is_dir():
                continue
            name = entry.name
            if not fnmatch.fnmatchcase(name, pattern):
                continue
            try:
                mtime = entry.stat().st_mtime_ns
            except OSError as err:
                raise FileStoreError(f"failed to retrieve file info for {name}: {err}") from err
            end = len(name) - len(self._extension)
            id_text = name[len(self._prefix):end]
            if not _ID_PATTERN.fullmatch(id_text):
                raise FileStoreError(f"invalid id in filename {name}")
            found.append((int(id_text) & 0xFFFF, mtime))
        found.sort(key=lambda item: item[1])
        return [packet_id for packet_id, _ in found]

    def _delete(self, packet_id: int) -> None:
        try:
            os.remove(self._file_path(packet_id))
        except OSError as err:
            raise FileStoreError(f"failed to remove packet file: {err}") from err

    def _delete_quietly(self, packet_id: int) -> None:
        try:
            self._delete(packet_id)
        except FileStoreError:
            pass

    def _file_path(self, packet_id: int) -> str:
        return os.path.join(self._path, self._file_name_prefix(packet_id) + self._extension)

    def _file_name_prefix(self, packet_id: int) -> str:
        return f"{self._prefix}{packet_id}"


def _remove_quietly(name: str) -> None:
    try:
        os.remove(name)
    except OSError:
        pass


__all__ = ["CORRUPT_EXTENSION", "FileStore", "FileStoreError"]

# Kept for callers that only need an in-memory buffer of a packet's bytes.
_ = io
import os
import time

import pytest

from mqttsession.file_store import CORRUPT_EXTENSION, FileStore, FileStoreError


def _payload(packet_id):
    return f"packet {packet_id}".encode()


class _FakePacket:
    def __init__(self, body):
        self.body = body

    def write_to(self, stream):
        return stream.write(self.body)


def test_file_store_basics(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")

    ids = [65535, 2, 10, 32300, 5890]
    for packet_id in ids:
        store.put(packet_id, 3, _payload(packet_id))
        time.sleep(0.05)  # order is kept by modification time

    store.delete(ids[2])

    with pytest.raises(FileStoreError):
        store.get(8)
    with pytest.raises(FileStoreError):
        store.get(ids[2])
    ids = ids[:2] + ids[3:]

    with store.get(32300) as stream:
        assert stream.read() == _payload(32300)

    assert store.list() == ids

    store.reset()
    assert store.list() == []


def test_file_store_naming(tmp_path):
    store = FileStore(tmp_path, "BlahXX", ".txt")
    store.put(1, 3, b"random file contents")

    assert os.listdir(tmp_path) == ["BlahXX1.txt"]

    store.quarantine(1)
    names = os.listdir(tmp_path)
    assert len(names) == 1
    assert names[0].startswith("BlahXX1")
    assert names[0].endswith(CORRUPT_EXTENSION)
    assert store.list() == []


def test_init_leaves_folder_empty(tmp_path):
    FileStore(tmp_path, "foo", ".ext")
    assert os.listdir(tmp_path) == []


def test_missing_folder_raises(tmp_path):
    with pytest.raises(FileStoreError, match="stat on folder failed"):
        FileStore(tmp_path / "missing", "foo", ".ext")


def test_extension_gets_leading_dot(tmp_path):
    store = FileStore(tmp_path, "p", "dat")
    store.put(1, 3, _FakePacket(b"abc"))
    assert os.listdir(tmp_path) == ["p1.dat"]
    with store.get(1) as stream:
        assert stream.read() == b"abc"


def test_str_describes_store(tmp_path):
    store = FileStore(tmp_path, "foo", "ext")
    assert str(store) == f"store path: {tmp_path}, prefix: foo, extension: .ext"


def test_put_replaces_existing_packet(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")
    store.put(5, 3, b"first")
    store.put(5, 6, b"second")
    assert store.list() == [5]
    with store.get(5) as stream:
        assert stream.read() == b"second"


def test_list_ignores_unrelated_files(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")
    (tmp_path / "other.txt").write_bytes(b"x")
    (tmp_path / "subdir").mkdir()
    store.put(3, 3, b"x")
    assert store.list() == [3]


def test_list_rejects_invalid_id(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")
    (tmp_path / "fooabc.ext").write_bytes(b"x")
    with pytest.raises(FileStoreError, match="invalid id"):
        store.list()


def test_delete_missing_raises(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")
    with pytest.raises(FileStoreError, match="failed to remove packet file"):
        store.delete(42)


def test_quarantine_missing_raises(tmp_path):
    store = FileStore(tmp_path, "foo", ".ext")
    with pytest.raises(FileStoreError, match="failed to move packet into quarantine"):
        store.quarantine(42)
import io

import pytest

from mqttsession.memory_store import MemoryStore, NotInStoreError


def _payload(packet_id):
    return f"packet {packet_id}".encode()


class _FakePacket:
    def __init__(self, body):
        self.body = body

    def write_to(self, stream):
        return stream.write(self.body)


def test_memory_store_basics():
    store = MemoryStore()
    ids = [65535, 2, 10, 32300, 5890]
    for packet_id in ids:
        store.put(packet_id, 3, _payload(packet_id))

    store.delete(ids[2])

    with pytest.raises(NotInStoreError):
        store.get(8)
    with pytest.raises(NotInStoreError):
        store.get(ids[2])
    ids = ids[:2] + ids[3:]

    stream = store.get(32300)
    assert stream.read() == _payload(32300)

    assert store.list() == ids

    store.reset()
    assert store.list() == []


def test_memory_store_big():
    store = MemoryStore()
    for packet_id in range(1, 65536):
        store.put(packet_id, 3, _payload(packet_id))
    assert len(store) == 65535

    for packet_id in range(1, 65536):
        assert store.get(packet_id).read() == _payload(packet_id)

    for packet_id in range(1, 65536):
        store.delete(packet_id)
    assert store.list() == []


def test_put_accepts_packet_objects():
    store = MemoryStore()
    store.put(7, 3, _FakePacket(b"\x30\x02ab"))
    assert store.get(7).read() == b"\x30\x02ab"


def test_replacing_packet_moves_it_to_end_of_order():
    store = MemoryStore()
    store.put(1, 3, b"a")
    store.put(2, 3, b"b")
    store.put(1, 6, b"c")
    assert store.list() == [2, 1]
    assert store.get(1).read() == b"c"


def test_delete_missing_raises():
    store = MemoryStore()
    with pytest.raises(NotInStoreError, match="packet 5"):
        store.delete(5)


def test_quarantine_removes_packet():
    store = MemoryStore()
    store.put(4, 3, b"")
    store.quarantine(4)
    assert len(store) == 0
    with pytest.raises(NotInStoreError):
        store.quarantine(4)


def test_get_returns_independent_streams():
    store = MemoryStore()
    store.put(9, 3, bytearray(b"xyz"))
    first = store.get(9)
    assert first.read() == b"xyz"
    second = store.get(9)
    assert isinstance(second, io.BytesIO)
    assert second.read() == b"xyz"
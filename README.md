# mqttsession

Building blocks for the session state of an MQTT v5 client. The package has no
runtime dependencies.

It has four modules:

- **`mqttsession.sendquota`** contains `SendQuota`, the send quota from section
  4.9 of the MQTT v5 specification. It limits how many QoS 1 and QoS 2
  `PUBLISH` packets are in flight at once, following the server's Receive
  Maximum. It also contains `UnexpectedReleaseError`.
- **`mqttsession.memory_store`** contains `MemoryStore`, a packet store held in
  memory, and `NotInStoreError`.
- **`mqttsession.file_store`** contains `FileStore`, a packet store kept on
  disk, one file per packet. It also contains `FileStoreError` and
  `CORRUPT_EXTENSION`.
- **`mqttsession.interfaces`** contains the `Packet` and `Storer` protocols and
  the errors `NoConnectionError` and `PacketIdentifiersExhaustedError`. Both
  errors derive from `SessionError`. Both protocols are `runtime_checkable`.

## Installation

```
pip install mqttsession
```

## Send quota

```python
from mqttsession.sendquota import SendQuota, UnexpectedReleaseError

quota = SendQuota(20)          # the server's Receive Maximum

quota.acquire(timeout=5.0)     # wait for a free slot before sending a PUBLISH
...                            # send it, then wait for PUBACK / PUBCOMP
quota.release()                # the message is fully acknowledged

quota.retransmit()             # take a slot for a resent message without waiting
print(quota.quota, quota.waiting)
```

### Acquiring slots

- A negative initial quota raises `ValueError`.
- Waiters get slots in the order they asked for them.
- If a slot is free and nobody is queued, `acquire` takes the slot at once. This holds even with `timeout=0`.
- If no slot comes free within `timeout` seconds, `acquire` raises `TimeoutError` and leaves the queue. With `timeout=None` it waits indefinitely.
- `retransmit` never blocks. It may take the quota below zero.

### Releasing slots

- `release` hands a freed slot straight to the longest-waiting caller.
- A `release` that would raise the quota above its initial value raises `UnexpectedReleaseError` and changes nothing. This can happen when a `PUBREL` is sent again after a reconnect.

### Properties

- `quota` gives the number of free slots.
- `waiting` gives the number of blocked callers.

## Packet stores

Both stores follow the `Storer` protocol:

| operation | meaning |
|-----------|---------|
| `put(packet_id, packet_type, data)` | store a packet, replacing any earlier one under that identifier |
| `get(packet_id)` | return a readable binary stream holding the stored packet; the caller closes it |
| `delete(packet_id)` | remove a packet |
| `quarantine(packet_id)` | move a corrupt packet out of the way |
| `list()` | packet identifiers, in the order they were stored |
| `reset()` | remove every packet |

`data` may be any of these:

- `bytes`, `bytearray` or `memoryview`.
- An object following the `Packet` protocol. Its `write_to(stream)` method writes its encoded bytes to a binary stream.

### In memory

```python
from mqttsession.memory_store import MemoryStore, NotInStoreError

store = MemoryStore()
store.put(10, 3, b"\x32\x05\x00\x01a\x00\x0a")   # 3 is the PUBLISH packet type
with store.get(10) as stream:
    raw = stream.read()
print(store.list(), len(store))
```

- A `get` or `delete` of an identifier that the store does not hold raises `NotInStoreError`, which is a `LookupError`.
- `quarantine` removes the packet.

### On disk

```python
from mqttsession.file_store import FileStore, FileStoreError

store = FileStore("/var/lib/myclient/session", "client", ".pkt")
store.put(1, 3, b"...")        # written as client1.pkt
print(store)                   # store path: ..., prefix: client, extension: .pkt
```

#### Creating the store

- The folder must already exist. If it does not, `FileStore` raises `FileStoreError`.
- A leading dot is added to the extension if it has none.
- When the store is created, it writes, reads and removes a test file in the folder. A folder that it cannot use fails straight away.

#### Storing, listing and quarantining

- Every packet is written to a temporary file, synced, and then renamed into place.
- `list` returns packets in the order given by their file modification times. Packets stored closer together than the file system's timestamp resolution may be listed in either order.
- A file that matches the prefix and extension but has no numeric identifier makes `list` fail.
- Quarantined packets stay in the folder. Each is renamed to `<prefix><id>-<random><extension>.CORRUPT` so it can be examined later. If the move fails, the packet is deleted so it is not resent on every reconnection, and the failure is raised.
- `reset` tries to delete every packet and raises the last failure, if there was one.
- All failures raise `FileStoreError`.

## What this package does not do

This package has no session manager. It does not do the following:

- allocate packet identifiers
- track transactions in flight
- resend stored packets after a reconnect
- answer `PUBLISH`, `PUBREC` or `PUBREL` packets

`NoConnectionError` and `PacketIdentifiersExhaustedError` are provided for such a manager, but nothing in the package raises them.

The package also does not encode or decode MQTT packets. It opens no network connections. The stores hold whatever bytes they are given.

## Running the tests

```
pip install -e ".[test]"
pytest
```
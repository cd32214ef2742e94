# tsddlib

Building blocks for the server side of a chat application that delivers its
messages through a separate IM service reached over HTTP.

## What is in the package

- `tsddlib.constants`: enums for channel types (`ChannelType`), group member
  status and roles, device types, QR code types, scan-login states, friend
  request sources, user status, call types and call results; sequence, group
  attribute, command and cache-prefix string constants; the `QRCodeModel`
  record with `to_json()` and `qrcode_model_from_json()`, which raises
  `DataError` on malformed input.
- `tsddlib.content`: the `ContentType` enum of message body types,
  `get_display_text()`, and helpers for person-to-person channel ids:
  `get_fake_channel_id()`, `is_fake_channel()` and
  `get_to_channel_id_with_fake_channel_id()`.
- `tsddlib.cache`: `MemoryCache` (thread-safe, in process; `set_and_expire`
  stores the value but does not expire it) and `RedisCache` (takes an
  `"host:port"` address and optional password, or a ready client through the
  `client=` keyword). Both offer `set`, `set_and_expire`, `get` (an empty
  string when the key is absent) and `delete`.
- `tsddlib.page`: `PageResult` with `to_dict()`.
- `tsddlib.messages`: dataclasses for the IM service's requests and responses
  (`MsgSendReq`, `MsgCMDReq`, `MessageResp`, `SyncackReq` and many more),
  `to_json_dict()` for their wire form (bytes as base64, enums as values),
  `parse_message()` and the other `parse_*` functions, and the `Setting`
  option byte with `to_uint8()` / `setting_from_uint8()`.
- `tsddlib.models`: records describing channels (`ChannelResp`, with
  `to_dict()`), friends, group members, devices and calls.
- `tsddlib.imclient`: `IMClient`, an HTTP client for the IM service API:
  sending messages, batches and commands, friend requests, revokes and typing
  notices; channels, black and white lists and subscribers; conversations and
  unread counts; message and conversation sync; search; online status; and
  message streams. Failures reported by the service raise `IMError`.
- `tsddlib.group_messages`, `tsddlib.channel_messages`,
  `tsddlib.rtc_messages`: functions that take an `IMClient` and send the
  system messages for group events, channel updates and call results;
  `format_second()` renders a duration as `MM:SS`.
- `tsddlib.seq`: `SequenceGenerator`, which hands out increasing numbers per
  flag while reserving them in blocks, and `SqliteSeqStore`, which keeps the
  reservations in an SQLite `seq` table.
- `tsddlib.context`: `AppContext`, which holds shared values, a memory cache,
  online-status, event and messages listeners, and repeating tasks started
  with `schedule()` and stopped with `close()` (or by leaving a `with` block).

## Installation

```
pip install tsddlib
```

With the test dependencies:

```
pip install "tsddlib[test]"
```

## Examples

Person-to-person channel ids:

```python
from tsddlib.content import get_fake_channel_id, get_to_channel_id_with_fake_channel_id

channel_id = get_fake_channel_id("alice", "bob")
other = get_to_channel_id_with_fake_channel_id(channel_id, "alice")  # "bob"
```

Message options packed into one byte:

```python
from tsddlib.messages import Setting, setting_from_uint8

flags = Setting(no_update_conversation=True).to_uint8()  # 64
assert setting_from_uint8(160).signal
```

Sending a command through the IM service:

```python
from tsddlib.constants import ChannelType
from tsddlib.imclient import IMClient
from tsddlib.messages import MsgCMDReq

client = IMClient("http://localhost:5001")
client.send_cmd(MsgCMDReq(
    channel_id="group1",
    channel_type=ChannelType.GROUP,
    cmd="memberUpdate",
    param={"group_no": "group1"},
))
```

Announcing a group member's departure:

```python
from tsddlib.group_messages import send_group_exit

send_group_exit(client, "group1", "u1", "Alice", ["u2", "u3"])
```

Sequence numbers:

```python
from tsddlib.seq import SequenceGenerator, SqliteSeqStore

generator = SequenceGenerator(SqliteSeqStore(":memory:"))
first = generator.gen_seq("user")  # 1000001
```

Repeating work:

```python
from tsddlib.context import AppContext

with AppContext() as ctx:
    ctx.schedule(5.0, lambda: print("tick"))
    ...
```

## What the package does not do

It is a library only. It has no command, runs no HTTP server or API routes,
and has no module system, database migrations or MySQL access; sequence
reservations are stored only through `SqliteSeqStore` or a store you supply
with the same `query` / `add_or_update` methods. It has no background task
queue, no request tracing and no search-engine client. The IM service itself
is not part of it: `IMClient` only talks to one that is already running.

## Running the tests

```
pytest
```
"""Request and response records exchanged with the IM service."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum, IntEnum
from typing import Any

from tsddlib.constants import DataError


class DeviceLevel(IntEnum):
    """Whether a device is the user's main device."""

    SLAVE = 0
    MASTER = 1


class DeviceFlag(IntEnum):
    """Kind of client device."""

    APP = 0
    WEB = 1
    PC = 2


class PullMode(IntEnum):
    """Direction in which channel messages are pulled."""

    DOWN = 0
    UP = 1


class UpdateTokenStatus(IntEnum):
    """Result of a token update."""

    BAN = 19
    SUCCESS = 200


def _wire(default: Any = None, *, name: str | None = None, omitempty: bool = False,
          skip: bool = False) -> Any:
    metadata: dict[str, Any] = {"omitempty": omitempty, "skip": skip}
    if name is not None:
        metadata["json"] = name
    return field(default=default, metadata=metadata)


def to_json_dict(obj: Any) -> Any:
    """JSON-ready form of a record, list, mapping or value, using wire field names.

    Byte strings become base64 text and enum members become their values.
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        result: dict[str, Any] = {}
        for f in fields(obj):
            if f.metadata.get("skip") or f.name.startswith("_"):
                continue
            value = getattr(obj, f.name)
            if f.metadata.get("omitempty") and not value:
                continue
            result[f.metadata.get("json", f.name)] = to_json_dict(value)
        return result
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): to_json_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_dict(v) for v in obj]
    return obj


@dataclass
class Channel:
    channel_id: str = ""
    channel_type: int = 0


@dataclass
class UpdateIMTokenReq:
    uid: str = ""
    token: str = ""
    device_flag: DeviceFlag = DeviceFlag.APP
    device_level: DeviceLevel = DeviceLevel.SLAVE


@dataclass
class UpdateIMTokenResp:
    status: int = 0


@dataclass
class SyncChannelMessageReq:
    login_uid: str = ""
    device_uuid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    start_message_seq: int = 0
    end_message_seq: int = 0
    limit: int = 0
    pull_mode: PullMode = PullMode.DOWN


@dataclass
class ChannelMaxSeqResp:
    message_seq: int = 0


@dataclass
class ClearConversationUnreadReq:
    uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    unread: int = 0
    message_seq: int = 0


@dataclass
class SyncackReq:
    """Acknowledgement of the last synchronised message sequence."""

    uid: str = ""
    last_message_seq: int = 0

    def check(self) -> None:
        """Raise ValueError when a required field is missing."""
        if not self.uid.strip():
            raise ValueError("用户UID不能为空！")
        if self.last_message_seq == 0:
            raise ValueError("最后一次messageSeq不能为0！")

    def __str__(self) -> str:
        return f"UID: {self.uid} LastMessageSeq: {self.last_message_seq}"


@dataclass
class OnlinestatusResp:
    uid: str = ""
    device_flag: int = 0
    last_offline: int = 0
    online: int = 0


@dataclass
class MessageDeleteReq:
    uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    message_ids: list[int] | None = None


@dataclass
class MessageRevokeReq:
    channel_id: str = ""
    channel_type: int = 0
    message_ids: list[int] | None = None


@dataclass
class ChannelDeleteReq:
    channel_id: str = ""
    channel_type: int = 0


@dataclass
class MsgRevokeReq:
    from_uid: str = ""
    operator: str = ""
    operator_name: str = ""
    channel_id: str = ""
    channel_type: int = 0
    message_id: int = 0


@dataclass
class SearchUserMessageReq:
    uid: str = ""
    payload: dict[str, Any] | None = None
    payload_types: list[int] | None = None
    from_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    topic: str = ""
    limit: int = 0
    page: int = 0
    start_time: int = 0
    end_time: int = 0
    highlights: list[str] | None = None


@dataclass
class MsgSearchReq:
    login_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    message_seqs: list[int] | None = None
    message_ids: list[int] | None = None
    client_msg_nos: list[str] | None = None


@dataclass
class UserBaseVo:
    uid: str = ""
    name: str = ""


@dataclass
class MsgHeader:
    """Delivery flags of a message."""

    no_persist: int = 0
    red_dot: int = 0
    sync_once: int = 0

    def __str__(self) -> str:
        return f"NoPersist:{self.no_persist} RedDot:{self.red_dot} SyncOnce:{self.sync_once}"


@dataclass
class MsgSendReq:
    """A message to send to a channel."""

    header: MsgHeader = field(default_factory=MsgHeader)
    setting: int = 0
    from_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    stream_no: str = ""
    subscribers: list[str] | None = None
    payload: bytes = b""

    def __str__(self) -> str:
        payload = self.payload.decode("utf-8", errors="replace")
        return f"ChannelID:{self.channel_id} ChannelType:{self.channel_type} Payload:{payload}"


@dataclass
class MsgSendResp:
    message_id: int = 0
    client_msg_no: str = ""
    message_seq: int = 0


@dataclass
class MsgSendBatch:
    header: MsgHeader = field(default_factory=MsgHeader)
    from_uid: str = ""
    subscribers: list[str] | None = None
    payload: bytes = b""


@dataclass
class MsgFriendApplyReq:
    apply_uid: str = ""
    apply_name: str = ""
    to_uid: str = ""
    remark: str = ""
    token: str = ""


@dataclass
class MsgFriendSureReq:
    to_uid: str = ""
    from_uid: str = ""
    from_name: str = ""


@dataclass
class MsgFriendDeleteReq:
    from_uid: str = ""
    to_uid: str = ""


@dataclass
class MsgGroupMemberAddReq:
    operator: str = ""
    operator_name: str = ""
    group_no: str = ""
    members: list[UserBaseVo] | None = None


@dataclass
class CMDGroupAvatarUpdateReq:
    group_no: str = ""
    members: list[str] | None = None


@dataclass
class MsgCMDReq:
    """A command message; ``no_persist`` is not part of the wire form."""

    no_persist: bool = _wire(False, skip=True)
    from_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    subscribers: list[str] | None = None
    cmd: str = ""
    param: dict[str, Any] | None = None


@dataclass
class MsgSyncReq:
    uid: str = ""
    message_seq: int = 0
    limit: int = 0


@dataclass
class CMDResp:
    cmd: str = ""
    param: Any = None


@dataclass
class Setting:
    """Per-message option bits."""

    receipt: bool = False
    no_update_conversation: bool = False
    signal: bool = False

    def to_uint8(self) -> int:
        """Pack the options into one byte."""
        return (int(self.receipt) << 7) | (int(self.no_update_conversation) << 6) | (
            int(self.signal) << 5
        )


def setting_from_uint8(value: int) -> Setting:
    """Unpack options from a setting byte."""
    return Setting(
        receipt=bool((value >> 7) & 0x01),
        no_update_conversation=bool((value >> 6) & 0x01),
        signal=bool((value >> 5) & 0x01),
    )


@dataclass
class StreamItemResp:
    stream_seq: int = 0
    client_msg_no: str = ""
    blob: bytes = b""


@dataclass
class MessageResp:
    """A stored message as returned by the IM service."""

    header: MsgHeader = field(default_factory=MsgHeader)
    setting: int = 0
    message_id_str: str = _wire("", name="message_idstr")
    message_id: int = 0
    message_seq: int = 0
    client_msg_no: str = ""
    expire: int = 0
    from_uid: str = ""
    to_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    timestamp: int = 0
    payload: bytes = b""
    stream_no: str = _wire("", omitempty=True)
    streams: list[StreamItemResp] | None = _wire(None, omitempty=True)
    is_deleted: int = 0
    voice_status: int = 0
    _payload_map: dict[str, Any] | None = field(
        default=None, init=False, repr=False, compare=False, metadata={"skip": True}
    )

    def get_payload_map(self) -> dict[str, Any]:
        """Payload decoded as a JSON object; raise ValueError when it is not one."""
        if self._payload_map is None:
            decoded = json.loads(self.payload)
            if decoded is None:
                return {}
            if not isinstance(decoded, dict):
                raise ValueError("payload is not a JSON object")
            self._payload_map = decoded
        return self._payload_map

    def get_content_type(self) -> int:
        """The payload's ``type`` field, or 0 when it cannot be read."""
        try:
            payload_map = self.get_payload_map()
        except ValueError:
            return 0
        value = payload_map.get("type")
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value


@dataclass
class SyncChannelMessageResp:
    start_message_seq: int = 0
    end_message_seq: int = 0
    pull_mode: PullMode = PullMode.DOWN
    messages: list[MessageResp] | None = None


@dataclass
class SyncUserConversationResp:
    channel_id: str = ""
    channel_type: int = 0
    unread: int = 0
    timestamp: int = 0
    last_msg_seq: int = 0
    last_client_msg_no: str = ""
    offset_msg_seq: int = 0
    version: int = 0
    recents: list[MessageResp] | None = None


@dataclass
class ConversationResp:
    channel_id: str = ""
    channel_type: int = 0
    unread: int = 0
    timestamp: int = 0
    last_message: MessageResp | None = None


@dataclass
class ChannelCreateReq:
    channel_id: str = ""
    channel_type: int = 0
    ban: int = 0
    large: int = 0
    subscribers: list[str] | None = None


@dataclass
class ChannelInfoCreateReq:
    channel_id: str = ""
    channel_type: int = 0
    ban: int = 0
    large: int = 0


@dataclass
class ChannelReq:
    channel_id: str = ""
    channel_type: int = 0


@dataclass
class DeleteConversationReq:
    uid: str = ""
    channel_id: str = ""
    channel_type: int = 0


@dataclass
class ChannelBlacklistReq:
    channel_id: str = ""
    channel_type: int = 0
    uids: list[str] | None = None


@dataclass
class ChannelWhitelistReq:
    channel_id: str = ""
    channel_type: int = 0
    uids: list[str] | None = None


@dataclass
class SubscriberAddReq:
    channel_id: str = ""
    channel_type: int = 0
    reset: int = 0
    subscribers: list[str] | None = None


@dataclass
class SubscriberRemoveReq:
    channel_id: str = ""
    channel_type: int = 0
    subscribers: list[str] | None = None


@dataclass
class UpdateSearchMessageReq:
    channel_id: str = ""
    message_ids: list[str] | None = None


@dataclass
class SearchUserMessageResp:
    total: int = 0
    limit: int = 0
    page: int = 0
    messages: list[MessageResp] | None = None


@dataclass
class MessageStreamStartReq:
    header: MsgHeader = field(default_factory=MsgHeader)
    client_msg_no: str = ""
    from_uid: str = ""
    channel_id: str = ""
    channel_type: int = 0
    payload: bytes = b""


@dataclass
class MessageStreamEndReq:
    stream_no: str = ""
    channel_id: str = ""
    channel_type: int = 0


def _decode_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise DataError()
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as exc:
        raise DataError() from exc


def _parse_header(data: dict[str, Any] | None) -> MsgHeader:
    data = data or {}
    return MsgHeader(
        no_persist=data.get("no_persist", 0),
        red_dot=data.get("red_dot", 0),
        sync_once=data.get("sync_once", 0),
    )


def _parse_messages(items: list[dict[str, Any]] | None) -> list[MessageResp] | None:
    if items is None:
        return None
    return [parse_message(item) for item in items]


def parse_message(data: dict[str, Any]) -> MessageResp:
    """Build a message from its decoded JSON object."""
    streams = data.get("streams")
    return MessageResp(
        header=_parse_header(data.get("header")),
        setting=data.get("setting", 0),
        message_id_str=data.get("message_idstr", ""),
        message_id=data.get("message_id", 0),
        message_seq=data.get("message_seq", 0),
        client_msg_no=data.get("client_msg_no", ""),
        expire=data.get("expire", 0),
        from_uid=data.get("from_uid", ""),
        to_uid=data.get("to_uid", ""),
        channel_id=data.get("channel_id", ""),
        channel_type=data.get("channel_type", 0),
        timestamp=data.get("timestamp", 0),
        payload=_decode_bytes(data.get("payload")),
        stream_no=data.get("stream_no", ""),
        streams=None
        if streams is None
        else [
            StreamItemResp(
                stream_seq=item.get("stream_seq", 0),
                client_msg_no=item.get("client_msg_no", ""),
                blob=_decode_bytes(item.get("blob")),
            )
            for item in streams
        ],
        is_deleted=data.get("is_deleted", 0),
        voice_status=data.get("voice_status", 0),
    )


def parse_conversation(data: dict[str, Any]) -> ConversationResp:
    """Build a conversation entry from its decoded JSON object."""
    last = data.get("last_message")
    return ConversationResp(
        channel_id=data.get("channel_id", ""),
        channel_type=data.get("channel_type", 0),
        unread=data.get("unread", 0),
        timestamp=data.get("timestamp", 0),
        last_message=parse_message(last) if last is not None else None,
    )


def parse_sync_user_conversation(data: dict[str, Any]) -> SyncUserConversationResp:
    """Build a synchronised conversation from its decoded JSON object."""
    return SyncUserConversationResp(
        channel_id=data.get("channel_id", ""),
        channel_type=data.get("channel_type", 0),
        unread=data.get("unread", 0),
        timestamp=data.get("timestamp", 0),
        last_msg_seq=data.get("last_msg_seq", 0),
        last_client_msg_no=data.get("last_client_msg_no", ""),
        offset_msg_seq=data.get("offset_msg_seq", 0),
        version=data.get("version", 0),
        recents=_parse_messages(data.get("recents")),
    )


def parse_sync_channel_message(data: dict[str, Any]) -> SyncChannelMessageResp:
    """Build a channel sync result from its decoded JSON object."""
    return SyncChannelMessageResp(
        start_message_seq=data.get("start_message_seq", 0),
        end_message_seq=data.get("end_message_seq", 0),
        pull_mode=PullMode(data.get("pull_mode", 0)),
        messages=_parse_messages(data.get("messages")),
    )


def parse_search_user_message(data: dict[str, Any]) -> SearchUserMessageResp:
    """Build a message search result from its decoded JSON object."""
    return SearchUserMessageResp(
        total=data.get("total", 0),
        limit=data.get("limit", 0),
        page=data.get("page", 0),
        messages=_parse_messages(data.get("messages")),
    )
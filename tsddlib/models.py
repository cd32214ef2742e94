"""Response records describing channels, friends, members and devices."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tsddlib.messages import DeviceFlag, to_json_dict


@dataclass
class ChannelRef:
    """Identifies a channel."""

    channel_id: str = ""
    channel_type: int = 0


@dataclass
class ChannelResp:
    """Channel details as presented to clients."""

    channel: ChannelRef = field(default_factory=ChannelRef)
    parent_channel: ChannelRef | None = field(default=None, metadata={"omitempty": True})
    username: str = field(default="", metadata={"omitempty": True})
    name: str = ""
    logo: str = ""
    remark: str = ""
    status: int = 0
    online: int = 0
    last_offline: int = 0
    device_flag: DeviceFlag = DeviceFlag.APP
    receipt: int = 0
    robot: int = 0
    category: str = ""
    stick: int = 0
    mute: int = 0
    show_nick: int = 0
    follow: int = 0
    be_deleted: int = 0
    be_blacklist: int = 0
    notice: str = ""
    save: int = 0
    forbidden: int = 0
    invite: int = 0
    flame: int = 0
    flame_second: int = 0
    extra: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with the wire field names."""
        return to_json_dict(self)


@dataclass
class Invite:
    invite_code: str = ""
    vercode: str = ""
    uid: str = ""


@dataclass
class FriendResp:
    remark: str = ""
    to_uid: str = ""
    is_deleted: int = 0
    is_alone: int = 0
    short_no: str = ""


@dataclass
class GroupMemberResp:
    group_no: str = ""
    uid: str = ""
    name: str = ""
    remark: str = ""
    invite_uid: str = ""
    is_deleted: int = 0
    role: int = 0
    status: int = 0
    created_at: str = ""
    forbidden_expir_time: int = 0


@dataclass
class DeviceResp:
    id: int = 0
    device_id: str = ""
    device_name: str = ""
    uid: str = ""
    device_model: str = ""


@dataclass
class BaseUserVO:
    uid: str = ""
    name: str = ""


@dataclass
class CallingChannelResp:
    channel_id: str = ""
    channel_type: int = 0
    room_name: str = ""
    participants: list[BaseUserVO] = field(default_factory=list)
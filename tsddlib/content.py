"""Message content types and helpers for person-to-person channel ids."""

from __future__ import annotations

import logging
import zlib
from enum import IntEnum

logger = logging.getLogger(__name__)


class ContentType(IntEnum):
    """Type of a message body."""

    # chat
    TEXT = 1
    IMAGE = 2
    GIF = 3
    VOICE = 4
    VIDEO = 5
    LOCATION = 6
    CARD = 7
    FILE = 8
    MULTIPLE_FORWARD = 11
    VECTOR_STICKER = 12
    EMOJI_STICKER = 13
    RICH_TEXT = 14
    INVITE_JOIN_ORGANIZATION = 16
    CONTENT_ERROR = 97
    SIGNAL_ERROR = 98
    CMD = 99
    # system
    FRIEND_APPLY = 1000
    GROUP_CREATE = 1001
    GROUP_MEMBER_ADD = 1002
    GROUP_MEMBER_REMOVE = 1003
    FRIEND_SURE = 1004
    GROUP_UPDATE = 1005
    REVOKE_MESSAGE = 1006
    GROUP_MEMBER_SCAN_JOIN = 1007
    GROUP_TRANSFER_GROUPER = 1008
    GROUP_MEMBER_INVITE = 1009
    GROUP_MEMBER_BE_REMOVE = 1020
    GROUP_MEMBER_QUIT = 1021
    GROUP_UPGRADE = 1022
    TIP = 2000
    # customer service
    HOTLINE_ASSIGN_TO = 1200
    HOTLINE_SOLVED = 1201
    HOTLINE_REOPEN = 1202
    # audio / video
    VIDEO_CALL_RESULT = 9989

    def __str__(self) -> str:
        return _CONTENT_NAMES.get(self, str(int(self)))


_CONTENT_NAMES = {
    ContentType.TEXT: "Text",
    ContentType.IMAGE: "Image",
    ContentType.GIF: "GIF",
    ContentType.VOICE: "Voice",
    ContentType.CMD: "CMD",
    ContentType.FRIEND_APPLY: "FriendApply",
    ContentType.GROUP_CREATE: "GroupCreate",
    ContentType.GROUP_MEMBER_ADD: "GroupMemberAdd",
    ContentType.GROUP_MEMBER_REMOVE: "GroupMemberRemove",
    ContentType.FRIEND_SURE: "FriendSure",
    ContentType.GROUP_UPDATE: "GroupUpdate",
    ContentType.REVOKE_MESSAGE: "RevokeMessage",
}

_DISPLAY_TEXT = {
    ContentType.TEXT: "文本消息",
    ContentType.IMAGE: "图片消息",
    ContentType.GIF: "GIF",
    ContentType.VOICE: "语音",
    ContentType.VIDEO: "视频",
    ContentType.LOCATION: "位置",
    ContentType.CARD: "名片",
    ContentType.FILE: "文件",
    ContentType.MULTIPLE_FORWARD: "合并转发消息",
    ContentType.VECTOR_STICKER: "贴纸",
    ContentType.EMOJI_STICKER: "emoji",
    ContentType.RICH_TEXT: "富文本消息",
}

_UNKNOWN_DISPLAY_TEXT = "未知消息类型"


def get_display_text(content_type: int) -> str:
    """Human readable label for a content type number."""
    return _DISPLAY_TEXT.get(int(content_type), _UNKNOWN_DISPLAY_TEXT)


def _crc32(text: str) -> int:
    return zlib.crc32(text.encode("utf-8")) & 0xFFFFFFFF


def get_fake_channel_id(from_uid: str, to_uid: str) -> str:
    """Channel id shared by two users, the same whichever one asks."""
    from_hash = _crc32(from_uid)
    to_hash = _crc32(to_uid)
    if from_hash > to_hash:
        return f"{from_uid}@{to_uid}"
    if from_hash == to_hash:
        logger.warning(
            "生成的fromUID的Hash和toUID的Hash是相同的！！ fromUIDHash=%d toUIDHash=%d fromUID=%s toUID=%s",
            from_hash,
            to_hash,
            from_uid,
            to_uid,
        )
    return f"{to_uid}@{from_uid}"


def is_fake_channel(channel_id: str) -> bool:
    """Whether a channel id names a person-to-person pair."""
    return "@" in channel_id


def get_to_channel_id_with_fake_channel_id(fake_channel_id: str, uid: str) -> str:
    """The other user's uid in a pair channel id, or the id itself if not a pair."""
    parts = fake_channel_id.split("@")
    if len(parts) != 2:
        return fake_channel_id
    first, second = parts
    return second if first == uid else first
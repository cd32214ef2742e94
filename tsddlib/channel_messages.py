"""Commands telling clients that a channel's information changed."""

from __future__ import annotations

import logging

from tsddlib.constants import CMD_CHANNEL_UPDATE, ChannelType
from tsddlib.imclient import IMClient
from tsddlib.messages import ChannelReq, MsgCMDReq

logger = logging.getLogger(__name__)

__all__ = [
    "send_channel_update_with_from_uid",
    "send_channel_update",
    "send_channel_update_to_group",
    "send_channel_update_to_user",
]


def send_channel_update_with_from_uid(
    client: IMClient, channel: ChannelReq, update_channel: ChannelReq, from_uid: str
) -> None:
    """Send into ``channel`` a command saying ``update_channel`` changed."""
    try:
        client.send_cmd(
            MsgCMDReq(
                channel_id=channel.channel_id,
                channel_type=channel.channel_type,
                from_uid=from_uid,
                cmd=CMD_CHANNEL_UPDATE,
                param={
                    "channel_id": update_channel.channel_id,
                    "channel_type": update_channel.channel_type,
                },
            )
        )
    except Exception:
        logger.exception("发送频道更新命令失败！")
        raise


def send_channel_update(client: IMClient, channel: ChannelReq, update_channel: ChannelReq) -> None:
    """Send a channel update command with no sender."""
    send_channel_update_with_from_uid(client, channel, update_channel, "")


def send_channel_update_to_group(client: IMClient, group_no: str) -> None:
    """Tell a group's members that the group changed."""
    channel = ChannelReq(channel_id=group_no, channel_type=ChannelType.GROUP.value)
    send_channel_update_with_from_uid(client, channel, channel, "")


def send_channel_update_to_user(client: IMClient, uid: str, channel: ChannelReq) -> None:
    """Tell one user that ``channel`` changed."""
    target = ChannelReq(channel_id=uid, channel_type=ChannelType.PERSON.value)
    send_channel_update_with_from_uid(client, target, channel, "")
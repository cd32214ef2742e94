"""Group notification messages: creation, updates, membership changes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from tsddlib.constants import (
    CMD_GROUP_MEMBER_UPDATE,
    GROUP_ATTR_KEY_FORBIDDEN,
    GROUP_ATTR_KEY_INVITE,
    GROUP_ATTR_KEY_NAME,
    GROUP_ATTR_KEY_NOTICE,
    GROUP_ATTR_KEY_STATUS,
    ChannelType,
)
from tsddlib.content import ContentType
from tsddlib.imclient import IMClient
from tsddlib.messages import (
    MsgCMDReq,
    MsgGroupMemberAddReq,
    MsgHeader,
    MsgSendReq,
    Setting,
    UserBaseVo,
    to_json_dict,
)

__all__ = [
    "MsgGroupCreateReq",
    "MsgGroupMemberInviteReq",
    "MsgGroupTransferGrouper",
    "MsgGroupMemberRemoveReq",
    "MsgGroupUpdateReq",
    "MsgGroupMemberScanJoin",
    "MsgGroupDisband",
    "OrgOrDeptEmployeeVO",
    "MsgOrgOrDeptCreateReq",
    "MsgOrgOrDeptEmployeeUpdateReq",
    "MsgOrgOrDeptEmployeeAddReq",
    "OrgEmployeeExitReq",
    "send_group_create",
    "send_unable_add_destroy_account_in_group",
    "send_group_update",
    "send_group_member_add",
    "send_group_upgrade",
    "send_group_member_be_remove",
    "send_group_member_remove",
    "send_group_member_scan_join",
    "send_group_transfer_grouper",
    "send_group_member_invite",
    "send_group_exit",
    "send_group_member_update",
]


@dataclass
class MsgGroupCreateReq:
    creator: str = ""
    creator_name: str = ""
    group_no: str = ""
    version: int = 0
    members: list[UserBaseVo] | None = None


@dataclass
class MsgGroupMemberInviteReq:
    group_no: str = ""
    invite_no: str = ""
    inviter: str = ""
    inviter_name: str = ""
    num: int = 0
    subscribers: list[str] | None = None


@dataclass
class MsgGroupTransferGrouper:
    group_no: str = ""
    old_grouper: str = ""
    old_grouper_name: str = ""
    new_grouper: str = ""
    new_grouper_name: str = ""


@dataclass
class MsgGroupMemberRemoveReq:
    operator: str = ""
    operator_name: str = ""
    group_no: str = ""
    members: list[UserBaseVo] | None = None


@dataclass
class MsgGroupUpdateReq:
    group_no: str = ""
    operator: str = ""
    operator_name: str = ""
    attr: str = ""
    data: dict[str, str] | None = None


@dataclass
class MsgGroupMemberScanJoin:
    group_no: str = ""
    generator: str = ""
    generator_name: str = ""
    scaner: str = ""
    scaner_name: str = ""


@dataclass
class MsgGroupDisband:
    group_no: str = ""
    operator: str = ""
    operator_name: str = ""


@dataclass
class OrgOrDeptEmployeeVO:
    operator: str = ""
    operator_name: str = ""
    employee_uid: str = ""
    employee_name: str = ""
    group_no: str = ""
    action: str = ""


@dataclass
class MsgOrgOrDeptCreateReq:
    group_no: str = ""
    group_category: str = ""
    name: str = ""
    operator: str = ""
    operator_name: str = ""
    members: list[OrgOrDeptEmployeeVO] | None = None


@dataclass
class MsgOrgOrDeptEmployeeUpdateReq:
    members: list[OrgOrDeptEmployeeVO] | None = None


@dataclass
class MsgOrgOrDeptEmployeeAddReq:
    group_no: str = ""
    name: str = ""
    members: list[UserBaseVo] | None = None


@dataclass
class OrgEmployeeExitReq:
    operator: str = ""
    group_nos: list[str] | None = None


def _payload(content: dict[str, Any]) -> bytes:
    text = json.dumps(
        to_json_dict(content), ensure_ascii=False, sort_keys=True, separators=(",", ":")
    )
    return text.encode("utf-8")


def _placeholders(count: int) -> str:
    return ",".join(f"{{{i}}}" for i in range(count))


def _send_to_group(
    client: IMClient,
    group_no: str,
    content: dict[str, Any],
    *,
    header: MsgHeader | None = None,
    setting: int = 0,
    subscribers: list[str] | None = None,
) -> None:
    client.send_message(
        MsgSendReq(
            header=header or MsgHeader(no_persist=0, red_dot=1, sync_once=0),
            setting=setting,
            channel_id=group_no,
            channel_type=ChannelType.GROUP.value,
            subscribers=subscribers,
            payload=_payload(content),
        )
    )


def _members_without_creator(req: MsgGroupCreateReq) -> list[UserBaseVo]:
    return [member for member in req.members or [] if member.uid != req.creator]


def send_group_create(client: IMClient, req: MsgGroupCreateReq) -> None:
    """Announce a new group and the members invited by its creator."""
    new_members = _members_without_creator(req)
    content = f"{req.creator_name}邀请{_placeholders(len(new_members))}加入群聊"
    _send_to_group(
        client,
        req.group_no,
        {
            "creator": req.creator,
            "creator_name": req.creator_name,
            "content": content,
            "version": req.version,
            "extra": new_members,
            "type": ContentType.GROUP_CREATE,
        },
    )


def send_unable_add_destroy_account_in_group(client: IMClient, req: MsgGroupCreateReq) -> None:
    """Tell a group that closed accounts could not be added."""
    new_members = _members_without_creator(req)
    content = f"用户{_placeholders(len(new_members))}已注销，无法添加到群聊"
    _send_to_group(
        client,
        req.group_no,
        {"content": content, "extra": new_members, "type": ContentType.TIP},
    )


def _update_text(attr: str, data: dict[str, str]) -> str:
    if attr == GROUP_ATTR_KEY_NAME:
        return f'修改群名为"{data.get(GROUP_ATTR_KEY_NAME, "")}"'
    if attr == GROUP_ATTR_KEY_NOTICE:
        notice = data.get(GROUP_ATTR_KEY_NOTICE, "")
        return "清空了群公告" if notice == "" else f'修改群公告为"{notice}"'
    if attr == GROUP_ATTR_KEY_FORBIDDEN:
        return "开启了群禁言" if data.get(GROUP_ATTR_KEY_FORBIDDEN) == "1" else "关闭了群禁言"
    if attr == GROUP_ATTR_KEY_INVITE:
        if data.get(GROUP_ATTR_KEY_INVITE) == "1":
            return "已启用“群聊邀请确认”，群成员需群主或管理员确认才能邀请朋友进群。"
        return "已恢复默认进群方式。"
    if attr == GROUP_ATTR_KEY_STATUS:
        return "解禁了该群" if data.get(GROUP_ATTR_KEY_STATUS) == "1" else "封禁了该群"
    return ""


def send_group_update(client: IMClient, req: MsgGroupUpdateReq) -> None:
    """Announce a change to one of a group's attributes."""
    content = "{0}" + _update_text(req.attr, req.data or {})
    _send_to_group(
        client,
        req.group_no,
        {
            "content": content,
            "extra": [UserBaseVo(uid=req.operator, name=req.operator_name)],
            "data": req.data,
            "type": ContentType.GROUP_UPDATE,
        },
    )


def send_group_member_add(client: IMClient, req: MsgGroupMemberAddReq) -> None:
    """Announce members invited into a group."""
    members = req.members or []
    content = f"{req.operator_name}邀请{_placeholders(len(members))}加入群聊"
    _send_to_group(
        client,
        req.group_no,
        {
            "from_uid": req.operator,
            "from_name": req.operator_name,
            "content": content,
            "extra": members,
            "type": ContentType.GROUP_MEMBER_ADD,
        },
    )


def send_group_upgrade(client: IMClient, group_no: str, member_count: int) -> None:
    """Announce that a group grows into a super group past ``member_count`` members."""
    content = f"群成员超过{member_count}，将自动升级为超级群"
    _send_to_group(
        client, group_no, {"content": content, "type": ContentType.GROUP_UPGRADE}
    )


def send_group_member_be_remove(client: IMClient, req: MsgGroupMemberRemoveReq) -> None:
    """Tell removed members, and only them, that they were removed."""
    if not req.members:
        return
    subscribers = [member.uid for member in req.members]
    _send_to_group(
        client,
        req.group_no,
        {
            "content": "你被{0}移除群聊",
            "visibles": subscribers,
            "extra": [UserBaseVo(uid=req.operator, name=req.operator_name)],
            "type": ContentType.GROUP_MEMBER_BE_REMOVE,
        },
        setting=Setting(no_update_conversation=True).to_uint8(),
        subscribers=subscribers,
    )


def send_group_member_remove(client: IMClient, req: MsgGroupMemberRemoveReq) -> None:
    """Announce members removed from a group."""
    members = req.members or []
    content = f"{req.operator_name}将{_placeholders(len(members))}移除群聊"
    _send_to_group(
        client,
        req.group_no,
        {"content": content, "extra": members, "type": ContentType.GROUP_MEMBER_REMOVE},
    )


def send_group_member_scan_join(client: IMClient, req: MsgGroupMemberScanJoin) -> None:
    """Announce a member who joined by scanning a QR code."""
    _send_to_group(
        client,
        req.group_no,
        {
            "content": "“{0}”通过“{1}”的二维码加入群聊",
            "extra": [
                UserBaseVo(uid=req.scaner, name=req.scaner_name),
                UserBaseVo(uid=req.generator, name=req.generator_name),
            ],
            "type": ContentType.GROUP_MEMBER_SCAN_JOIN,
        },
    )


def send_group_transfer_grouper(client: IMClient, req: MsgGroupTransferGrouper) -> None:
    """Announce a new group owner."""
    _send_to_group(
        client,
        req.group_no,
        {
            "content": "“{0}”已成为新群主",
            "extra": [UserBaseVo(uid=req.new_grouper, name=req.new_grouper_name)],
            "type": ContentType.GROUP_TRANSFER_GROUPER,
        },
    )


def send_group_member_invite(client: IMClient, req: MsgGroupMemberInviteReq) -> None:
    """Ask the group's managers to confirm an invitation."""
    content = f"“{{0}}“想邀请{req.num}位朋友加入群聊"
    _send_to_group(
        client,
        req.group_no,
        {
            "content": content,
            "extra": [UserBaseVo(uid=req.inviter, name=req.inviter_name)],
            "invite_no": req.invite_no,
            "type": ContentType.GROUP_MEMBER_INVITE,
            "visibles": req.subscribers,
        },
    )


def send_group_exit(
    client: IMClient, group_no: str, uid: str, name: str, visible_uids: list[str] | None
) -> None:
    """Announce that a member left a group."""
    _send_to_group(
        client,
        group_no,
        {
            "content": "“{0}“退出群聊",
            "type": ContentType.GROUP_MEMBER_QUIT,
            "extra": [UserBaseVo(uid=uid, name=name)],
            "visibles": visible_uids,
        },
        header=MsgHeader(red_dot=1),
    )


def send_group_member_update(client: IMClient, group_no: str) -> None:
    """Send the command telling clients to refresh a group's members."""
    client.send_cmd(
        MsgCMDReq(
            channel_id=group_no,
            channel_type=ChannelType.GROUP.value,
            cmd=CMD_GROUP_MEMBER_UPDATE,
            param={"group_no": group_no},
        )
    )
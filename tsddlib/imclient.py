"""HTTP client for the IM service API."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable

import requests

from tsddlib.constants import CMD_FRIEND_DELETED, CMD_TYPING, ChannelType
from tsddlib.content import ContentType
from tsddlib.messages import (
    Channel,
    ChannelBlacklistReq,
    ChannelCreateReq,
    ChannelDeleteReq,
    ChannelInfoCreateReq,
    ChannelMaxSeqResp,
    ChannelWhitelistReq,
    ClearConversationUnreadReq,
    ConversationResp,
    DeleteConversationReq,
    MessageResp,
    MessageRevokeReq,
    MessageStreamEndReq,
    MessageStreamStartReq,
    MsgCMDReq,
    MsgFriendApplyReq,
    MsgFriendDeleteReq,
    MsgFriendSureReq,
    MsgHeader,
    MsgRevokeReq,
    MsgSearchReq,
    MsgSendBatch,
    MsgSendReq,
    MsgSendResp,
    MsgSyncReq,
    OnlinestatusResp,
    SearchUserMessageReq,
    SearchUserMessageResp,
    Setting,
    SubscriberAddReq,
    SubscriberRemoveReq,
    SyncackReq,
    SyncChannelMessageReq,
    SyncChannelMessageResp,
    SyncUserConversationResp,
    UpdateIMTokenReq,
    UpdateIMTokenResp,
    parse_conversation,
    parse_message,
    parse_search_user_message,
    parse_sync_channel_message,
    parse_sync_user_conversation,
    to_json_dict,
)

logger = logging.getLogger(__name__)


class IMError(RuntimeError):
    """Raised when the IM service answers with a failure."""


def _dumps(obj: Any) -> str:
    return json.dumps(to_json_dict(obj), ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _payload(content: dict[str, Any]) -> bytes:
    return _dumps(content).encode("utf-8")


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _bad_request_message(resp: requests.Response) -> Any:
    """The ``msg`` field of a 400 response body, or None."""
    result = json.loads(resp.text)
    if isinstance(result, dict) and result.get("msg") is not None:
        return result["msg"]
    return None


class IMClient:
    """Talks to the IM service over its HTTP API."""

    def __init__(
        self,
        api_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        test: bool = False,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.test = test

    # ---------- transport ----------

    def _post(self, path: str, body: Any) -> requests.Response:
        return self.session.post(
            self.api_url + path,
            data=_dumps(body).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )

    def _get(self, path: str, params: dict[str, str]) -> requests.Response:
        return self.session.get(self.api_url + path, params=params, timeout=self.timeout)

    def _check(self, resp: requests.Response) -> None:
        if resp.status_code == 200:
            return
        if resp.status_code == 400:
            msg = _bad_request_message(resp)
            if msg is not None:
                raise IMError(f"IM服务失败！ -> {msg}")
        raise IMError(f"IM服务返回状态[{resp.status_code}]失败！")

    def _check_named(self, resp: requests.Response, name: str) -> None:
        if resp.status_code == 200:
            return
        if resp.status_code == 400:
            msg = _bad_request_message(resp)
            if msg is not None:
                raise IMError(f"IM服务[{name}]失败！ -> {msg}")
        raise IMError(f"IM服务[{name}]返回状态[{resp.status_code}]失败！")

    def _post_checked(self, path: str, body: Any) -> Any:
        resp = self._post(path, body)
        self._check(resp)
        return resp.json()

    # ---------- users ----------

    def update_im_token(self, req: UpdateIMTokenReq) -> UpdateIMTokenResp | None:
        """Register a user's token for one device."""
        result = self._post_checked(
            "/user/token",
            {
                "uid": req.uid,
                "token": req.token,
                "device_level": req.device_level,
                "device_flag": req.device_flag,
            },
        )
        if result is None:
            return None
        return UpdateIMTokenResp(status=_as_int(result.get("status")))

    def quit_user_device(self, uid: str, device_flag: int) -> None:
        """Log a user out of one device kind; ``-1`` logs out of all devices."""
        resp = self._post("/user/device_quit", {"uid": uid, "device_flag": device_flag})
        if resp.status_code != 200:
            logger.error("IM服务错误！ status=%d", resp.status_code)
            raise IMError(f"IM服务返回状态[{resp.status_code}]失败！")

    def online_status(self, uids: list[str]) -> list[OnlinestatusResp] | None:
        """Online state of the given users."""
        if self.test:
            logger.info("获取指定用户的在线状态 req=%s", _dumps(uids))
            return None
        result = self._post_checked("/user/onlinestatus", uids)
        if result is None:
            return None
        return [
            OnlinestatusResp(
                uid=item.get("uid", ""),
                device_flag=item.get("device_flag", 0),
                last_offline=item.get("last_offline", 0),
                online=item.get("online", 0),
            )
            for item in result
        ]

    # ---------- messages ----------

    def send_message_batch(self, req: MsgSendBatch) -> None:
        """Send one message to a batch of users."""
        resp = self._post("/message/sendbatch", req)
        self._check_named(resp, "SendMessageBatch")

    def send_message(self, req: MsgSendReq) -> None:
        """Send a message to a channel."""
        self.send_message_with_result(req)

    def send_message_with_result(self, req: MsgSendReq) -> MsgSendResp:
        """Send a message to a channel and return its assigned ids."""
        resp = self._post("/message/send", req)
        self._check_named(resp, "SendMessage")
        try:
            body = json.loads(resp.text)
        except ValueError:
            body = None
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            data = {}
        return MsgSendResp(
            message_id=_as_int(data.get("message_id")),
            message_seq=_as_int(data.get("message_seq")) & 0xFFFFFFFF,
            client_msg_no=_as_str(data.get("client_msg_no")),
        )

    def send_friend_apply(self, req: MsgFriendApplyReq) -> None:
        """Deliver a friend request to its recipient."""
        self.send_message(
            MsgSendReq(
                header=MsgHeader(no_persist=0, red_dot=0, sync_once=1),
                channel_id=req.to_uid,
                channel_type=ChannelType.PERSON.value,
                payload=_payload(
                    {
                        "apply_uid": req.apply_uid,
                        "apply_name": req.apply_name,
                        "to_uid": req.to_uid,
                        "remark": req.remark,
                        "token": req.token,
                        "type": ContentType.FRIEND_APPLY,
                    }
                ),
            )
        )

    def send_friend_sure(self, req: MsgFriendSureReq) -> None:
        """Tell a user that a friend request was accepted."""
        self.send_message(
            MsgSendReq(
                header=MsgHeader(no_persist=0, red_dot=0, sync_once=1),
                channel_id=req.to_uid,
                channel_type=ChannelType.PERSON.value,
                payload=_payload(
                    {
                        "sure_uid": req.from_uid,
                        "sure_name": req.from_name,
                        "to_uid": req.to_uid,
                        "content": "你们已经是好友了，可以愉快的聊天了！",
                        "type": ContentType.FRIEND_SURE,
                    }
                ),
            )
        )

    def send_friend_delete(self, req: MsgFriendDeleteReq) -> None:
        """Tell a user's devices that a friend was removed."""
        self.send_cmd(
            MsgCMDReq(
                channel_id=req.from_uid,
                channel_type=ChannelType.PERSON.value,
                cmd=CMD_FRIEND_DELETED,
                param={"uid": req.to_uid},
            )
        )

    def send_revoke(self, req: MsgRevokeReq) -> None:
        """Send the command that revokes a message."""
        self.send_cmd(
            MsgCMDReq(
                from_uid=req.from_uid,
                channel_id=req.channel_id,
                channel_type=req.channel_type,
                cmd="messageRevoke",
                param={"message_id": str(req.message_id)},
            )
        )

    def send_cmd(self, req: MsgCMDReq) -> None:
        """Send a command message that does not update conversations."""
        content: dict[str, Any] = {"cmd": req.cmd, "type": ContentType.CMD}
        if req.param is not None:
            content["param"] = req.param
        self.send_message(
            MsgSendReq(
                header=MsgHeader(no_persist=1 if req.no_persist else 0, red_dot=0, sync_once=1),
                setting=Setting(no_update_conversation=True).to_uint8(),
                from_uid=req.from_uid,
                channel_id=req.channel_id,
                channel_type=req.channel_type,
                subscribers=req.subscribers,
                payload=_payload(content),
            )
        )

    def send_typing(self, channel_id: str, channel_type: int, from_uid: str) -> None:
        """Send a transient "typing" command."""
        self.send_cmd(
            MsgCMDReq(
                no_persist=True,
                cmd=CMD_TYPING,
                channel_id=channel_id,
                channel_type=channel_type,
                param={
                    "from_uid": from_uid,
                    "channel_id": channel_id,
                    "channel_type": channel_type,
                },
            )
        )

    def sync_message(self, req: MsgSyncReq) -> list[MessageResp] | None:
        """Fetch a user's messages after a sequence number."""
        result = self._post_checked("/message/sync", req)
        if result is None:
            return None
        return [parse_message(item) for item in result]

    def sync_message_ack(self, req: SyncackReq) -> None:
        """Acknowledge synchronised messages."""
        self._check(self._post("/message/syncack", req))

    def revoke_message(self, req: MessageRevokeReq) -> None:
        """Revoke stored messages."""
        self._check(self._post("/message/revoke", req))

    def search_user_messages(self, req: SearchUserMessageReq) -> SearchUserMessageResp | None:
        """Search a user's messages through the search plugin."""
        resp = self._post("/plugins/wk.plugin.search/usersearch", req)
        self._check(resp)
        logger.debug("%s", resp.text)
        result = resp.json()
        return None if result is None else parse_search_user_message(result)

    def search_messages(self, req: MsgSearchReq) -> SyncChannelMessageResp | None:
        """Look up messages by sequence, id or client number."""
        result = self._post_checked("/messages", req)
        return None if result is None else parse_sync_channel_message(result)

    # ---------- channels ----------

    def create_or_update_channel_info(self, req: ChannelInfoCreateReq) -> None:
        self._check(self._post("/channel/info", req))

    def create_or_update_channel(self, req: ChannelCreateReq) -> None:
        self._check(self._post("/channel", req))

    def blacklist_add(self, req: ChannelBlacklistReq) -> None:
        self._check(self._post("/channel/blacklist_add", req))

    def blacklist_set(self, req: ChannelBlacklistReq) -> None:
        self._check(self._post("/channel/blacklist_set", req))

    def blacklist_remove(self, req: ChannelBlacklistReq) -> None:
        self._check(self._post("/channel/blacklist_remove", req))

    def whitelist_add(self, req: ChannelWhitelistReq) -> None:
        self._check(self._post("/channel/whitelist_add", req))

    def whitelist_set(self, req: ChannelWhitelistReq) -> None:
        """Replace a channel's whitelist."""
        self._check(self._post("/channel/whitelist_set", req))

    def whitelist_remove(self, req: ChannelWhitelistReq) -> None:
        self._check(self._post("/channel/whitelist_remove", req))

    def add_subscriber(self, req: SubscriberAddReq) -> None:
        resp = self._post("/channel/subscriber_add", req)
        if resp.status_code != 200:
            raise IMError(f"IM服务[IMAddSubscriber]返回状态[{resp.status_code}]失败！")

    def remove_subscriber(self, req: SubscriberRemoveReq) -> None:
        self._check(self._post("/channel/subscriber_remove", req))

    def delete_channel(self, req: ChannelDeleteReq) -> None:
        self._check(self._post("/channel/delete", req))

    def get_channel_max_seq(self, channel_id: str, channel_type: int) -> ChannelMaxSeqResp | None:
        """Largest message sequence number in a channel."""
        resp = self._get(
            "/channel/max_message_seq",
            {"channel_id": channel_id, "channel_type": str(int(channel_type))},
        )
        self._check(resp)
        result = resp.json()
        if result is None:
            return None
        return ChannelMaxSeqResp(message_seq=_as_int(result.get("message_seq")))

    def get_with_channel_and_seqs(
        self, channel_id: str, channel_type: int, login_uid: str, seqs: Iterable[int]
    ) -> SyncChannelMessageResp | None:
        """Messages of a channel with the given sequence numbers."""
        result = self._post_checked(
            "/messages",
            {
                "channel_id": channel_id,
                "channel_type": channel_type,
                "message_seqs": list(seqs),
                "login_uid": login_uid,
            },
        )
        return None if result is None else parse_sync_channel_message(result)

    def sync_channel_message(self, req: SyncChannelMessageReq) -> SyncChannelMessageResp | None:
        """Pull a range of a channel's messages."""
        result = self._post_checked("/channel/messagesync", req)
        return None if result is None else parse_sync_channel_message(result)

    # ---------- conversations ----------

    def get_conversations(self, uid: str) -> list[ConversationResp] | None:
        """A user's recent conversations."""
        resp = self._get("/conversations", {"uid": uid})
        self._check(resp)
        result = resp.json()
        if result is None:
            return None
        return [parse_conversation(item) for item in result]

    def clear_conversation_unread(self, req: ClearConversationUnreadReq) -> None:
        """Set a conversation's unread count; transport failures are ignored."""
        try:
            resp = self._post("/conversations/setUnread", req)
        except requests.RequestException:
            return None
        self._check(resp)
        return None

    def delete_conversation(self, req: DeleteConversationReq) -> None:
        """Remove a recent conversation; transport failures are ignored."""
        try:
            resp = self._post("/conversations/delete", req)
        except requests.RequestException:
            return None
        self._check(resp)
        return None

    def sync_user_conversation(
        self,
        uid: str,
        version: int,
        msg_count: int,
        last_msg_seqs: str,
        larges: list[Channel] | None,
    ) -> list[SyncUserConversationResp] | None:
        """Conversations changed since a version."""
        result = self._post_checked(
            "/conversation/sync",
            {
                "uid": uid,
                "version": version,
                "last_msg_seqs": last_msg_seqs,
                "msg_count": msg_count,
                "larges": larges,
            },
        )
        if result is None:
            return None
        return [parse_sync_user_conversation(item) for item in result]

    # ---------- streams ----------

    def stream_start(self, req: MessageStreamStartReq) -> str:
        """Open a message stream and return its stream number."""
        result = self._post_checked("/streammessage/start", req)
        if result is None:
            raise IMError("result is nil")
        stream_no = result.get("stream_no")
        if not isinstance(stream_no, str):
            raise IMError("stream_no is missing")
        return stream_no

    def stream_end(self, req: MessageStreamEndReq) -> None:
        """Close a message stream."""
        self._check(self._post("/streammessage/end", req))
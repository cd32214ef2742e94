"""Messages recording the outcome of a one-to-one call."""

from __future__ import annotations

import json
from dataclasses import dataclass

from tsddlib.constants import ChannelType, RTCCallType, RTCResultType
from tsddlib.content import ContentType
from tsddlib.imclient import IMClient
from tsddlib.messages import MsgHeader, MsgSendReq, to_json_dict

__all__ = ["P2pRtcMessageReq", "format_second", "send_rtc_call_result"]


@dataclass
class P2pRtcMessageReq:
    from_uid: str = ""
    to_uid: str = ""
    call_type: RTCCallType = RTCCallType.AUDIO
    result_type: RTCResultType = RTCResultType.CANCEL
    second: int = 0


def _pad(value: int) -> str:
    return f"0{value}" if value < 10 else str(value)


def format_second(seconds: int) -> str:
    """Render a duration in seconds as ``MM:SS``."""
    minutes = abs(seconds) // 60
    if seconds < 0:
        minutes = -minutes
    secs = seconds - minutes * 60
    return f"{_pad(minutes)}:{_pad(secs)}"


def _result_text(req: P2pRtcMessageReq) -> str:
    if req.result_type == RTCResultType.CANCEL:
        return "通话取消"
    if req.result_type == RTCResultType.MISSED:
        return "未接听"
    if req.result_type == RTCResultType.REFUSE:
        return "通话拒绝"
    if req.result_type == RTCResultType.HANGUP:
        return f"通话时长：{format_second(req.second)}"
    return ""


def send_rtc_call_result(client: IMClient, req: P2pRtcMessageReq) -> None:
    """Post the result of a call into the callee's person channel."""
    content = {
        "type": ContentType.VIDEO_CALL_RESULT,
        "content": _result_text(req),
        "second": req.second,
        "call_type": req.call_type,
        "result_type": req.result_type,
    }
    payload = json.dumps(
        to_json_dict(content), ensure_ascii=False, sort_keys=True, separators=(",", ":")
    ).encode("utf-8")
    client.send_message(
        MsgSendReq(
            header=MsgHeader(red_dot=1),
            from_uid=req.from_uid,
            channel_id=req.to_uid,
            channel_type=ChannelType.PERSON.value,
            payload=payload,
        )
    )
import base64
import json

import pytest
import responses

from tsddlib.constants import ChannelType, RTCCallType, RTCResultType
from tsddlib.content import ContentType
from tsddlib.imclient import IMClient, IMError
from tsddlib.rtc_messages import P2pRtcMessageReq, format_second, send_rtc_call_result

API = "http://im.example.com"


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        mock.add(responses.POST, API + "/message/send", json={"data": {}}, status=200)
        yield mock


@pytest.fixture
def client():
    return IMClient(API)


def _sent(rsps):
    assert len(rsps.calls) == 1
    body = json.loads(rsps.calls[0].request.body)
    return body, json.loads(base64.b64decode(body["payload"]))


@pytest.mark.parametrize("seconds,expected", [(0, "00:00"), (65, "01:05"), (600, "10:00")])
def test_format_second_values(seconds, expected):
    assert format_second(seconds) == expected


@pytest.mark.parametrize("seconds", [1, 9, 10, 59, 60, 61, 599, 3599, 3600, 7384])
def test_format_second_round_trip(seconds):
    minutes, secs = format_second(seconds).split(":")
    assert len(secs) == 2
    assert len(minutes) >= 2
    assert int(minutes) * 60 + int(secs) == seconds


def test_hangup_result(rsps, client):
    req = P2pRtcMessageReq(
        from_uid="u1", to_uid="u2", call_type=RTCCallType.VIDEO,
        result_type=RTCResultType.HANGUP, second=125,
    )
    send_rtc_call_result(client, req)
    body, payload = _sent(rsps)
    assert body["from_uid"] == "u1"
    assert body["channel_id"] == "u2"
    assert body["channel_type"] == ChannelType.PERSON
    assert body["header"]["red_dot"] == 1
    assert payload["content"] == "通话时长：" + format_second(125)
    assert payload["type"] == ContentType.VIDEO_CALL_RESULT
    assert payload["second"] == 125
    assert payload["call_type"] == RTCCallType.VIDEO
    assert payload["result_type"] == RTCResultType.HANGUP


@pytest.mark.parametrize(
    "result_type,text",
    [
        (RTCResultType.CANCEL, "通话取消"),
        (RTCResultType.MISSED, "未接听"),
        (RTCResultType.REFUSE, "通话拒绝"),
    ],
)
def test_other_results(rsps, client, result_type, text):
    send_rtc_call_result(client, P2pRtcMessageReq(to_uid="u2", result_type=result_type))
    _, payload = _sent(rsps)
    assert payload["content"] == text
    assert payload["result_type"] == result_type


def test_failure_raises(client):
    with responses.RequestsMock() as mock:
        mock.add(responses.POST, API + "/message/send", json={"msg": "no"}, status=400)
        with pytest.raises(IMError, match="no"):
            send_rtc_call_result(client, P2pRtcMessageReq(to_uid="u2"))
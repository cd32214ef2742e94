import json

import pytest

from tsddlib.constants import (
    ChannelType,
    DataError,
    GroupMemberRole,
    QRCodeModel,
    QRCodeType,
    RTCResultType,
    qrcode_model_from_json,
)


def test_channel_type_lookup_by_value():
    assert [ChannelType(n) for n in range(len(ChannelType))] == list(ChannelType)
    assert ChannelType(2) is ChannelType.GROUP


def test_group_member_role_lookup_by_value():
    assert GroupMemberRole(1) is GroupMemberRole.CREATOR
    assert GroupMemberRole(0) is GroupMemberRole.NORMAL


def test_rtc_result_type_lookup_by_value():
    assert RTCResultType(1) is RTCResultType.HANGUP
    assert RTCResultType(3) is RTCResultType.REFUSE


def test_qrcode_to_json_fields():
    model = QRCodeModel(type=QRCodeType.GROUP, data={"group_no": "g1"})
    decoded = json.loads(model.to_json())
    assert decoded == {"type": "group", "data": {"group_no": "g1"}}


def test_qrcode_round_trip():
    model = QRCodeModel(type=QRCodeType.SCAN_LOGIN, data={"uuid": "abc", "n": 3})
    parsed = qrcode_model_from_json(model.to_json())
    assert parsed == model
    assert parsed.type is QRCodeType.SCAN_LOGIN


def test_qrcode_unknown_type_kept_as_string():
    parsed = qrcode_model_from_json('{"type": "other", "data": {}}')
    assert parsed.type == "other"
    assert parsed.data == {}


def test_qrcode_null_data():
    parsed = qrcode_model_from_json('{"type": "group", "data": null}')
    assert parsed.data is None
    assert json.loads(parsed.to_json())["data"] is None


@pytest.mark.parametrize(
    "text",
    ["not json", '{"type": 5, "data": {}}', "[1, 2]", '{"type": "group", "data": [1]}'],
)
def test_qrcode_bad_input_raises(text):
    with pytest.raises(DataError):
        qrcode_model_from_json(text)


def test_data_error_default_message():
    assert "数据格式有误" in str(DataError())
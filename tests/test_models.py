import json

from tsddlib.messages import DeviceFlag
from tsddlib.models import (
    BaseUserVO,
    CallingChannelResp,
    ChannelRef,
    ChannelResp,
    FriendResp,
    GroupMemberResp,
)


def test_channel_resp_omits_empty_optional_fields():
    resp = ChannelResp(channel=ChannelRef("g1", 2), name="team")
    data = resp.to_dict()
    assert "parent_channel" not in data
    assert "username" not in data
    assert data["channel"] == {"channel_id": "g1", "channel_type": 2}
    assert data["name"] == "team"


def test_channel_resp_includes_optional_fields_when_set():
    resp = ChannelResp(
        channel=ChannelRef("t1", 5),
        parent_channel=ChannelRef("c1", 4),
        username="bot",
    )
    data = resp.to_dict()
    assert data["parent_channel"] == {"channel_id": "c1", "channel_type": 4}
    assert data["username"] == "bot"


def test_channel_resp_device_flag_and_extra_serialise():
    resp = ChannelResp(device_flag=DeviceFlag.WEB, extra={"screenshot": 1})
    data = json.loads(json.dumps(resp.to_dict()))
    assert data["device_flag"] == int(DeviceFlag.WEB)
    assert data["extra"] == {"screenshot": 1}


def test_channel_resp_wire_keys():
    data = ChannelResp().to_dict()
    for key in ("show_nick", "be_deleted", "be_blacklist", "flame_second", "last_offline"):
        assert key in data


def test_calling_channel_participants_independent():
    first = CallingChannelResp(channel_id="a")
    second = CallingChannelResp(channel_id="b")
    first.participants.append(BaseUserVO(uid="u1", name="n"))
    assert second.participants == []
    assert first.participants[0].uid == "u1"


def test_records_equality():
    assert FriendResp(to_uid="x", remark="r") == FriendResp(remark="r", to_uid="x")
    member = GroupMemberResp(group_no="g", uid="u", role=1)
    assert member.role == 1
    assert member != GroupMemberResp(group_no="g", uid="u", role=2)
import json
import struct

import pytest

from sigar.privileges import (
    SE_DEBUG_PRIVILEGE,
    SE_PRIVILEGE_ENABLED,
    SE_PRIVILEGE_ENABLED_BY_DEFAULT,
    SE_PRIVILEGE_REMOVED,
    SE_PRIVILEGE_USED_FOR_ACCESS,
    DebugInfo,
    Privilege,
    User,
    encode_enable_privileges,
    parse_token_privileges,
)
from sigar.windows import Version


def test_privilege_str_default_enabled():
    priv = Privilege.from_attributes(
        20, SE_DEBUG_PRIVILEGE,
        SE_PRIVILEGE_ENABLED_BY_DEFAULT | SE_PRIVILEGE_ENABLED,
    )
    assert str(priv) == "SeDebugPrivilege=(Default, Enabled)"


def test_privilege_str_disabled_removed_used():
    priv = Privilege.from_attributes(
        3, "SeShutdownPrivilege",
        SE_PRIVILEGE_REMOVED | SE_PRIVILEGE_USED_FOR_ACCESS,
    )
    assert str(priv) == "SeShutdownPrivilege=(Disabled, Removed, Used)"


def test_from_attributes_flags():
    priv = Privilege.from_attributes(7, "X", SE_PRIVILEGE_USED_FOR_ACCESS)
    assert (priv.enabled_by_default, priv.enabled, priv.removed, priv.used) == (
        False, False, False, True,
    )
    assert priv.luid == 7 and priv.name == "X"


def test_to_json_omits_false_optional_flags():
    assert Privilege(name="X").to_json() == {"enabled": False}
    full = Privilege.from_attributes(
        1, "X",
        SE_PRIVILEGE_ENABLED_BY_DEFAULT | SE_PRIVILEGE_ENABLED
        | SE_PRIVILEGE_REMOVED | SE_PRIVILEGE_USED_FOR_ACCESS,
    )
    assert full.to_json() == {
        "enabled_by_default": True,
        "enabled": True,
        "removed": True,
        "used": True,
    }


def test_user_str():
    user = User(sid="S-1-5-18", account="alice", domain="EXAMPLE", type=1)
    assert str(user) == "User:EXAMPLE\\alice, SID:S-1-5-18, Type:1"


def test_debug_info_str_is_json():
    priv = Privilege.from_attributes(20, SE_DEBUG_PRIVILEGE, SE_PRIVILEGE_ENABLED)
    info = DebugInfo(
        os_version=Version(6, 2, 9200),
        arch="amd64",
        num_cpu=4,
        user=User(sid="S-1-5-18", account="alice", domain="EXAMPLE", type=1),
        process_privs={SE_DEBUG_PRIVILEGE: priv},
    )
    doc = json.loads(str(info))
    assert list(doc) == ["OSVersion", "Arch", "NumCPU", "User", "ProcessPrivs"]
    assert doc["OSVersion"] == {"Major": 6, "Minor": 2, "Build": 9200}
    assert doc["User"]["Account"] == "alice"
    assert doc["ProcessPrivs"] == {SE_DEBUG_PRIVILEGE: {"enabled": True}}


def test_encode_enable_privileges_wire_format():
    data = encode_enable_privileges([20])
    assert data == struct.pack("<I", 1) + struct.pack("<q", 20) + struct.pack("<I", 2)


def test_encode_then_parse_round_trip():
    names = {20: SE_DEBUG_PRIVILEGE, 19: "SeShutdownPrivilege"}
    data = encode_enable_privileges([20, 19])
    privs = parse_token_privileges(data, names.__getitem__)
    assert set(privs) == set(names.values())
    for luid, name in names.items():
        assert privs[name].luid == luid
        assert privs[name].enabled is True
        assert privs[name].enabled_by_default is False


def test_parse_reads_attribute_bits():
    data = (
        struct.pack("<I", 1)
        + struct.pack("<q", 5)
        + struct.pack("<I", SE_PRIVILEGE_REMOVED | SE_PRIVILEGE_ENABLED_BY_DEFAULT)
    )
    privs = parse_token_privileges(data, lambda luid: f"p{luid}")
    priv = privs["p5"]
    assert priv.removed and priv.enabled_by_default and not priv.enabled


def test_parse_empty_count():
    assert parse_token_privileges(struct.pack("<I", 0), str) == {}


@pytest.mark.parametrize(
    "data,message",
    [
        (b"\x01\x00", "PrivilegeCount"),
        (struct.pack("<I", 1) + b"\x00" * 4, "LUID"),
        (struct.pack("<I", 1) + struct.pack("<q", 1) + b"\x00", "attributes"),
    ],
)
def test_parse_short_data_raises(data, message):
    with pytest.raises(ValueError, match=message):
        parse_token_privileges(data, str)
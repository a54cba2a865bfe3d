import dataclasses

import pytest

from mcproto.versions import State, resolve, supported_versions


def test_resolve_by_game_version():
    info = resolve("1.21.11")
    assert info.mc_version == "1.21.11"
    assert info.protocol_number == 774


def test_resolve_by_protocol_number_matches_game_version():
    assert resolve(774) == resolve("1.21.11")
    assert resolve("774") == resolve("1.21.11")


def test_packet_ids_of_774():
    ids = resolve("1.21.11").ids
    assert ids.sb_handshake == 0x00
    assert ids.sb_keep_alive == 0x1B
    assert ids.cb_keep_alive == 0x2B
    assert ids.cb_system_chat == 0x77


def test_unsupported_game_version():
    with pytest.raises(ValueError, match="unsupported MC version"):
        resolve("not-a-version")


def test_unsupported_protocol_number():
    with pytest.raises(ValueError, match="unsupported protocol"):
        resolve(1)


def test_every_supported_version_resolves():
    versions = supported_versions()
    assert "1.21.11" in versions
    for version in versions:
        assert resolve(version).mc_version == version


def test_state_from_value():
    assert [State(i) for i in range(4)] == [
        State.HANDSHAKING,
        State.PLAY,
        State.LOGIN,
        State.STATUS,
    ]
    with pytest.raises(ValueError):
        State(4)


def test_version_info_is_immutable():
    info = resolve("1.21.11")
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.protocol_number = 1
    assert resolve("1.21.11").protocol_number == 774
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.ids.sb_keep_alive = 0
    assert resolve("1.21.11").ids.sb_keep_alive == 0x1B
"""Protocol states, packet ids and the table of supported game versions."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class State(enum.IntEnum):
    """Connection state of the protocol."""

    HANDSHAKING = 0
    PLAY = 1
    LOGIN = 2
    STATUS = 3


@dataclass(frozen=True)
class PacketIDs:
    """Packet ids of one protocol version; ``sb`` is serverbound, ``cb`` clientbound."""

    # Handshake
    sb_handshake: int
    # Login
    sb_login_start: int
    sb_login_ack: int
    cb_login_success: int
    cb_disconnect: int
    cb_set_compression: int
    # Configuration
    sb_known_packs: int
    sb_finish_config: int
    sb_plugin_response: int
    cb_known_packs: int
    cb_registry_data: int
    cb_finish_config: int
    cb_plugin_request: int
    cb_feature_flags: int
    # Play, serverbound
    sb_accept_teleport: int
    sb_chat_command: int
    sb_chat: int
    sb_client_command: int
    sb_client_tick_end: int
    sb_client_information: int
    sb_keep_alive: int
    sb_player_position: int
    sb_player_position_rotation: int
    sb_player_rotation: int
    sb_player_on_ground: int
    sb_player_command: int
    sb_player_action: int
    sb_player_input: int
    sb_chunk_batch_received: int
    sb_player_loaded: int
    sb_use_item: int
    # Play, clientbound
    cb_chunk_batch_finished: int
    cb_chunk_batch_start: int
    cb_spawn_entity: int
    cb_block_update: int
    cb_disconnect_play: int
    cb_unload_chunk: int
    cb_game_event: int
    cb_keep_alive: int
    cb_chunk_data: int
    cb_login: int
    cb_player_chat: int
    cb_sync_position: int
    cb_set_default_spawn_position: int
    cb_respawn: int
    cb_update_health: int
    cb_system_chat: int
    cb_combat_death: int


@dataclass(frozen=True)
class VersionInfo:
    """A game version, its protocol number and its packet ids."""

    mc_version: str
    protocol_number: int
    ids: PacketIDs


V774 = VersionInfo(
    mc_version="1.21.11",
    protocol_number=774,
    ids=PacketIDs(
        sb_handshake=0x00,
        sb_login_start=0x00,
        sb_login_ack=0x03,
        cb_login_success=0x02,
        cb_disconnect=0x02,
        cb_set_compression=0x03,
        sb_known_packs=0x07,
        sb_finish_config=0x03,
        sb_plugin_response=0x02,
        cb_known_packs=0x0E,
        cb_registry_data=0x07,
        cb_finish_config=0x03,
        cb_plugin_request=0x01,
        cb_feature_flags=0x0C,
        sb_accept_teleport=0x00,
        sb_chat_command=0x06,
        sb_chat=0x08,
        sb_client_command=0x0B,
        sb_client_tick_end=0x0C,
        sb_client_information=0x0D,
        sb_keep_alive=0x1B,
        sb_player_position=0x1D,
        sb_player_position_rotation=0x1E,
        sb_player_rotation=0x1F,
        sb_player_on_ground=0x20,
        sb_player_command=0x29,
        sb_player_action=0x28,
        sb_player_input=0x2A,
        sb_chunk_batch_received=0x0A,
        sb_player_loaded=0x2B,
        sb_use_item=0x38,
        cb_chunk_batch_finished=0x0B,
        cb_chunk_batch_start=0x0C,
        cb_spawn_entity=0x01,
        cb_block_update=0x08,
        cb_disconnect_play=0x20,
        cb_unload_chunk=0x25,
        cb_game_event=0x26,
        cb_keep_alive=0x2B,
        cb_chunk_data=0x2C,
        cb_login=0x30,
        cb_player_chat=0x3F,
        cb_combat_death=0x42,
        cb_sync_position=0x46,
        cb_respawn=0x50,
        cb_set_default_spawn_position=0x5F,
        cb_update_health=0x66,
        cb_system_chat=0x77,
    ),
)

_MC_VERSIONS = {"1.21.11": 774}
_REGISTRY = {774: V774}


def resolve(version: Union[str, int]) -> VersionInfo:
    """Look up a version by game version string or by protocol number."""
    if isinstance(version, str) and version in _MC_VERSIONS:
        return _REGISTRY[_MC_VERSIONS[version]]
    try:
        number = int(version)
    except ValueError:
        raise ValueError(f"unsupported MC version: {version!r}") from None
    try:
        return _REGISTRY[number]
    except KeyError:
        raise ValueError(f"unsupported protocol: {number}") from None


def supported_versions() -> list[str]:
    """The game version strings that can be resolved."""
    return list(_MC_VERSIONS)
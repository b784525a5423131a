"""
Tests for the game server plumbing around the engine.

Covers: the versioned state store, configuration, room management,
committing actions with conflict retry, and the WebSocket message loop.
"""

import asyncio
import json

import pytest

from periodic_draft.config import RuleConfig, ServerConfig
from periodic_draft.game_engine import ACCEPTED, CONFLICT, DECLINED
from periodic_draft.elements.engine import ElementsEngine
from periodic_draft.server import GameServer
from periodic_draft.store import StateStore


# ── Helpers ───────────────────────────────────────────────────────────

class FakeWebSocket:
    """Replays incoming messages and records everything sent back."""

    def __init__(self, messages):
        self.messages = [json.dumps(m) for m in messages]
        self.sent = []

    async def send(self, data):
        self.sent.append(json.loads(data))

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self.messages:
            yield message

    def of_type(self, msg_type):
        return [m for m in self.sent if m["type"] == msg_type]


class FlakyStore(StateStore):
    """Loses the compare-and-set race a fixed number of times."""

    def __init__(self, failures):
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def compare_and_set(self, key, expected_version, new_state):
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            # another writer commits in between
            current = self._states[key]
            current["version"] = current.get("version", 0) + 1
            return False
        return super().compare_and_set(key, expected_version, new_state)


def make_server(store=None, retries=3):
    server = GameServer(ServerConfig(commit_retries=retries), store=store)
    server.register_engine("elements", ElementsEngine)
    return server


def started_room(server):
    code, host_id, host_token = server.create_room("elements", "Alice")
    guest_id, _ = server.join_room(code, "Bob")
    server.start_game(code, host_id)
    return server.rooms[code], host_id, guest_id, host_token


# ══════════════════════════════════════════════════════════════════════
# State Store
# ══════════════════════════════════════════════════════════════════════

class TestStateStore:

    def test_read_returns_copy(self):
        store = StateStore()
        store.create("ROOM1", {"version": 0, "players": [1, 2]})
        snapshot = store.read("ROOM1")
        snapshot["players"].append(3)
        assert store.read("ROOM1")["players"] == [1, 2]

    def test_compare_and_set(self):
        store = StateStore()
        store.create("ROOM1", {"version": 0})
        assert store.compare_and_set("ROOM1", 0, {"version": 1, "x": 1})
        assert store.read("ROOM1") == {"version": 1, "x": 1}

    def test_stale_write_rejected(self):
        store = StateStore()
        store.create("ROOM1", {"version": 0})
        assert store.compare_and_set("ROOM1", 0, {"version": 1})
        assert not store.compare_and_set("ROOM1", 0, {"version": 1, "late": True})
        assert store.read("ROOM1") == {"version": 1}

    def test_duplicate_create(self):
        store = StateStore()
        store.create("ROOM1", {"version": 0})
        with pytest.raises(ValueError):
            store.create("ROOM1", {"version": 0})

    def test_missing_key(self):
        store = StateStore()
        assert "NOPE" not in store
        with pytest.raises(KeyError):
            store.read("NOPE")


# ══════════════════════════════════════════════════════════════════════
# Configuration
# ══════════════════════════════════════════════════════════════════════

class TestConfig:

    def test_rule_defaults(self):
        rules = RuleConfig()
        assert rules.word_length == 5
        assert rules.placement_ladder == [8, 5, 2]
        assert rules.full_deck_size == 103

    def test_increasing_ladder_rejected(self):
        with pytest.raises(ValueError):
            RuleConfig(placement_ladder=[2, 5, 8])

    def test_negative_ladder_rejected(self):
        with pytest.raises(ValueError):
            RuleConfig(placement_ladder=[8, -1])

    def test_server_from_env(self):
        config = ServerConfig.from_env({
            "PERIODIC_PORT": "9000",
            "PERIODIC_LOG_LEVEL": "debug",
            "PERIODIC_COMMIT_RETRIES": "5",
        })
        assert config.port == 9000
        assert config.log_level == "DEBUG"
        assert config.commit_retries == 5
        assert config.host == "0.0.0.0"

    def test_bad_log_level(self):
        with pytest.raises(ValueError):
            ServerConfig(log_level="chatty")


# ══════════════════════════════════════════════════════════════════════
# Room Management
# ══════════════════════════════════════════════════════════════════════

class TestRooms:

    def test_unknown_game(self):
        server = make_server()
        with pytest.raises(ValueError):
            server.create_room("chess", "Alice")

    def test_only_host_can_start(self):
        server = make_server()
        code, host_id, _ = server.create_room("elements", "Alice")
        guest_id, _ = server.join_room(code, "Bob")
        with pytest.raises(ValueError):
            server.start_game(code, guest_id)

    def test_needs_two_players(self):
        server = make_server()
        code, host_id, _ = server.create_room("elements", "Alice")
        with pytest.raises(ValueError):
            server.start_game(code, host_id)

    def test_start_stores_state(self):
        server = make_server()
        room, host_id, guest_id, _ = started_room(server)
        state = server.game_state(room)
        assert state["player_ids"] == [host_id, guest_id]
        assert state["version"] == 0

    def test_cannot_join_started_game(self):
        server = make_server()
        room, _, _, _ = started_room(server)
        with pytest.raises(ValueError):
            server.join_room(room.code, "Carol")


# ══════════════════════════════════════════════════════════════════════
# Committing Actions
# ══════════════════════════════════════════════════════════════════════

class TestCommit:

    def test_accepted_action_is_stored(self):
        server = make_server()
        room, host_id, _, _ = started_room(server)
        result = server.commit_action(room, host_id, {"kind": "draft_card", "card_index": 0})
        assert result.status == ACCEPTED
        state = server.game_state(room)
        assert state["version"] == 1
        assert len(state["players"][0]["drafted"]) == 1

    def test_declined_action_leaves_store(self):
        server = make_server()
        room, host_id, _, _ = started_room(server)
        result = server.commit_action(room, host_id, {"kind": "draft_card", "card_index": 99})
        assert result.status == DECLINED
        assert server.game_state(room)["version"] == 0

    def test_retry_after_conflict(self):
        store = FlakyStore(failures=1)
        server = make_server(store=store)
        room, host_id, _, _ = started_room(server)
        result = server.commit_action(room, host_id, {"kind": "draft_card", "card_index": 0})
        assert result.status == ACCEPTED
        assert store.attempts == 2
        assert len(server.game_state(room)["players"][0]["drafted"]) == 1

    def test_conflict_after_retries_exhausted(self):
        store = FlakyStore(failures=10)
        server = make_server(store=store, retries=2)
        room, host_id, _, _ = started_room(server)
        result = server.commit_action(room, host_id, {"kind": "draft_card", "card_index": 0})
        assert result.status == CONFLICT
        assert store.attempts == 2
        assert server.game_state(room)["players"][0]["drafted"] == []


# ══════════════════════════════════════════════════════════════════════
# WebSocket Loop
# ══════════════════════════════════════════════════════════════════════

class TestConnection:

    def test_create_over_websocket(self):
        server = make_server()
        ws = FakeWebSocket([{"type": "create", "name": "Alice"}])
        asyncio.run(server.handle_connection(ws))
        created = ws.of_type("created")
        assert len(created) == 1
        assert created[0]["game"] == "elements"
        assert created[0]["room_code"] in server.rooms

    def test_requires_auth(self):
        server = make_server()
        ws = FakeWebSocket([{"type": "start"}])
        asyncio.run(server.handle_connection(ws))
        assert ws.sent[0]["type"] == "error"

    def test_non_object_message(self):
        server = make_server()
        ws = FakeWebSocket([[], 5, {"type": "create", "name": "Alice"}])
        asyncio.run(server.handle_connection(ws))
        assert [m["type"] for m in ws.sent] == ["error", "error", "created"]

    def test_chat_broadcast(self):
        server = make_server()
        code, _, token = server.create_room("elements", "Alice")
        ws = FakeWebSocket([
            {"type": "auth", "token": token},
            {"type": "chat", "message": "hello"},
        ])
        asyncio.run(server.handle_connection(ws))
        chat = ws.of_type("chat")
        assert chat == [{"type": "chat", "from": "Alice", "message": "hello"}]

    def test_play_flow(self):
        server = make_server()
        code, host_id, token = server.create_room("elements", "Alice")
        server.join_room(code, "Bob")

        ws = FakeWebSocket([
            {"type": "auth", "token": token},
            {"type": "start"},
            {"type": "action", "action": {"kind": "draft_card", "card_index": 0}},
            {"type": "action", "action": {"kind": "draft_card", "card_index": 0}},
        ])
        asyncio.run(server.handle_connection(ws))

        assert ws.of_type("authenticated")[0]["is_host"] is True
        assert len(ws.of_type("game_started")) == 1

        states = ws.of_type("game_state")
        last = states[-1]
        assert last["state"]["players"][0]["drafted"] != []
        assert last["your_turn"] is False
        assert last["phase_info"]["round"] == 1

        errors = ws.of_type("action_error")
        assert len(errors) == 1
        assert errors[0]["status"] == DECLINED

        assert server.rooms[code].players[host_id].connected is False

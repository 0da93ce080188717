from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from spellgame.api.models import JoinMessage, PlayerState, StartMessage, SubmitMessage, UpdateMessage, parse_inbound


def test_join_frame_parses_camel_case_fields() -> None:
    msg = parse_inbound(json.dumps({"type": "join", "sessionId": "abc", "playerId": "p1", "playerName": "Alice"}))

    assert isinstance(msg, JoinMessage)
    assert (msg.session_id, msg.player_id, msg.player_name) == ("abc", "p1", "Alice")


def test_lobby_id_and_numeric_player_id_are_accepted() -> None:
    msg = parse_inbound(json.dumps({"type": "submit", "lobbyId": "abc", "playerId": 1699999, "spelling": " Apple"}))

    assert isinstance(msg, SubmitMessage)
    assert msg.session_id == "abc"
    assert msg.player_id == "1699999"
    # No trimming.
    assert msg.spelling == " Apple"


def test_start_frame() -> None:
    assert isinstance(parse_inbound('{"type": "start", "sessionId": "abc"}'), StartMessage)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "{}",
        '{"type": "dance", "sessionId": "abc"}',
        '{"type": "join", "sessionId": "abc"}',
        '{"type": "submit", "sessionId": "abc", "playerId": "p1"}',
        '{"type": "start", "sessionId": ""}',
    ],
)
def test_malformed_frames_are_rejected(raw: str) -> None:
    with pytest.raises(ValidationError):
        parse_inbound(raw)


def test_update_wire_shape() -> None:
    update = UpdateMessage(
        players=[PlayerState(id="p1", name="Alice", lives=3)],
        current_word="apple",
        current_speller="p1",
    )

    assert update.to_wire() == {
        "type": "update",
        "players": [{"id": "p1", "name": "Alice", "lives": 3}],
        "currentWord": "apple",
        "currentSpeller": "p1",
    }

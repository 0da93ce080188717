from __future__ import annotations

from datetime import UTC, datetime

import pytest

from spellgame.api.models import PlayerState, SessionPhase, SessionState
from spellgame.turn_processing.validators import ValidationContext, pipeline_for_action


def _state(*, phase: SessionPhase, players: list[PlayerState] | None = None, speller: str | None = None) -> SessionState:
    now = datetime.now(tz=UTC)
    return SessionState(
        session_id="s1",
        created_at=now,
        last_updated_at=now,
        players=players or [],
        current_word="apple",
        current_speller=speller,
        phase=phase,
    )


def _ctx(action: str, player_id: str = "p1") -> ValidationContext:
    return ValidationContext(session_id="s1", player_id=player_id, action=action)


def test_submit_denied_while_pending() -> None:
    with pytest.raises(ValueError) as e:
        pipeline_for_action("submit").validate(ctx=_ctx("submit"), state=_state(phase=SessionPhase.pending))

    assert "not allowed" in str(e.value)
    assert "pending" in str(e.value)


def test_submit_denied_for_unknown_player() -> None:
    state = _state(phase=SessionPhase.active, players=[PlayerState(id="p1", name="A", lives=3)], speller="p1")

    with pytest.raises(ValueError) as e:
        pipeline_for_action("submit").validate(ctx=_ctx("submit", "ghost"), state=state)

    assert str(e.value) == "Player not found"


def test_submit_denied_out_of_turn() -> None:
    players = [PlayerState(id="p1", name="A", lives=3), PlayerState(id="p2", name="B", lives=3)]
    state = _state(phase=SessionPhase.active, players=players, speller="p1")

    with pytest.raises(ValueError) as e:
        pipeline_for_action("submit").validate(ctx=_ctx("submit", "p2"), state=state)

    assert "Not your turn" in str(e.value)

    # The current speller passes every check.
    pipeline_for_action("submit").validate(ctx=_ctx("submit", "p1"), state=state)


def test_start_requires_players() -> None:
    with pytest.raises(ValueError) as e:
        pipeline_for_action("start").validate(ctx=_ctx("start"), state=_state(phase=SessionPhase.pending))

    assert str(e.value) == "No players"


def test_join_denied_once_ended() -> None:
    with pytest.raises(ValueError):
        pipeline_for_action("join").validate(ctx=_ctx("join"), state=_state(phase=SessionPhase.ended))


def test_unknown_action_pipeline_raises() -> None:
    with pytest.raises(ValueError) as e:
        pipeline_for_action("nope")

    assert "Unknown action" in str(e.value)

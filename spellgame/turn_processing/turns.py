from __future__ import annotations

from dataclasses import dataclass

from spellgame.api.models import PlayerState, SessionState


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    correct: bool
    # Set when the submitting player just lost their last life.
    eliminated_player_id: str | None = None
    # No players remain; the session has to be torn down.
    session_over: bool = False


def next_player_index(players: list[PlayerState], current_speller: str | None) -> int | None:
    """Index of the player after `current_speller` in turn order.

    Wraps to 0 when the speller is no longer in `players` (e.g. just
    eliminated). Returns None when nobody is left.
    """

    if not players:
        return None
    pos = next((i for i, p in enumerate(players) if p.id == current_speller), None)
    if pos is None:
        return 0
    return (pos + 1) % len(players)


def is_correct_spelling(*, spelling: str, word: str) -> bool:
    # Case-insensitive exact match; whitespace is significant.
    return spelling.lower() == word.lower()


def advance_speller(*, state: SessionState) -> bool:
    """Move `current_speller` to the next player. False when no one is left."""

    idx = next_player_index(state.players, state.current_speller)
    if idx is None:
        state.current_speller = None
        return False
    state.current_speller = state.players[idx].id
    return True


def resolve_submission(*, state: SessionState, player_id: str, spelling: str) -> SubmissionOutcome:
    """Apply one validated submission from the current speller to `state`."""

    if is_correct_spelling(spelling=spelling, word=state.current_word):
        advance_speller(state=state)
        return SubmissionOutcome(correct=True)

    player = state.find_player(player_id)
    if player is None:
        raise ValueError("Player not found")

    player.lives -= 1
    eliminated = None
    if player.lives <= 0:
        state.players = [p for p in state.players if p.id != player_id]
        eliminated = player_id

    if not advance_speller(state=state):
        return SubmissionOutcome(correct=False, eliminated_player_id=eliminated, session_over=True)
    return SubmissionOutcome(correct=False, eliminated_player_id=eliminated)

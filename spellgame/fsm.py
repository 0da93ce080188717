from __future__ import annotations

from statemachine import State, StateMachine

from spellgame.api.models import SessionPhase, SessionState


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.

    - phases: pending -> active -> ended
    - `begin` from active restarts the rotation; `ended` is terminal.
    - the service layer mutates players/word; the FSM only guards phase changes.
    """

    pending = State(SessionPhase.pending.value, value=SessionPhase.pending.value, initial=True)
    active = State(SessionPhase.active.value, value=SessionPhase.active.value)
    ended = State(SessionPhase.ended.value, value=SessionPhase.ended.value, final=True)

    begin = pending.to(active) | active.to.itself()
    finish = pending.to(ended) | active.to(ended)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state_value))

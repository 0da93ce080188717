from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from spellgame.api.models import SessionPhase, SessionState


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    session_id: str
    player_id: str
    action: str


class TurnValidator(ABC):
    """A small, composable validation unit for an incoming action."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PhaseValidator(TurnValidator):
    allowed_phases: frozenset[SessionPhase]

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if state.phase not in self.allowed_phases:
            allowed = ",".join(sorted(p.value for p in self.allowed_phases))
            raise ValueError(f"Action '{ctx.action}' not allowed in phase '{state.phase.value}' (allowed: {allowed})")


@dataclass(frozen=True, slots=True)
class KnownPlayerValidator(TurnValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if state.find_player(ctx.player_id) is None:
            raise ValueError("Player not found")


@dataclass(frozen=True, slots=True)
class CurrentSpellerValidator(TurnValidator):
    """Only the current speller may submit."""

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if ctx.player_id != state.current_speller:
            raise ValueError(f"Not your turn (expected player_id={state.current_speller})")


@dataclass(frozen=True, slots=True)
class HasPlayersValidator(TurnValidator):
    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if not state.players:
            raise ValueError("No players")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TurnValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state)


DEFAULT_ACTION_PIPELINES: dict[str, ValidatorPipeline] = {
    "join": ValidatorPipeline(
        validators=(PhaseValidator(allowed_phases=frozenset({SessionPhase.pending, SessionPhase.active})),)
    ),
    "start": ValidatorPipeline(
        validators=(
            PhaseValidator(allowed_phases=frozenset({SessionPhase.pending, SessionPhase.active})),
            HasPlayersValidator(),
        )
    ),
    "submit": ValidatorPipeline(
        validators=(
            PhaseValidator(allowed_phases=frozenset({SessionPhase.active})),
            KnownPlayerValidator(),
            CurrentSpellerValidator(),
        )
    ),
}


def pipeline_for_action(action: str) -> ValidatorPipeline:
    pipe = DEFAULT_ACTION_PIPELINES.get(action)
    if pipe is None:
        raise ValueError(f"Unknown action: {action}")
    return pipe

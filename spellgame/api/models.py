from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class SessionPhase(StrEnum):
    pending = "pending"
    active = "active"
    ended = "ended"


class PlayerState(BaseModel):
    id: str
    name: str
    lives: int


class SessionState(BaseModel):
    session_id: str
    created_at: datetime
    last_updated_at: datetime

    # Join order is turn order.
    players: list[PlayerState] = Field(default_factory=list)

    current_word: str = ""
    current_speller: str | None = None

    phase: SessionPhase = SessionPhase.pending

    def find_player(self, player_id: str) -> PlayerState | None:
        return next((p for p in self.players if p.id == player_id), None)


# ---- WebSocket frames ----


class _InboundBase(BaseModel):
    # Browser clients frequently send numeric ids (e.g. Date.now()).
    model_config = ConfigDict(coerce_numbers_to_str=True)

    session_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("sessionId", "lobbyId", "session_id"),
    )


class JoinMessage(_InboundBase):
    type: Literal["join"]
    player_id: str = Field(..., min_length=1, validation_alias=AliasChoices("playerId", "player_id"))
    player_name: str = Field("", validation_alias=AliasChoices("playerName", "player_name"))


class StartMessage(_InboundBase):
    type: Literal["start"]


class SubmitMessage(_InboundBase):
    type: Literal["submit"]
    player_id: str = Field(..., min_length=1, validation_alias=AliasChoices("playerId", "player_id"))
    # Compared case-insensitively, never trimmed.
    spelling: str


InboundMessage = Annotated[Union[JoinMessage, StartMessage, SubmitMessage], Field(discriminator="type")]

inbound_message_adapter: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: str | bytes) -> InboundMessage:
    """Validate one raw JSON frame into a join/start/submit message.

    Raises pydantic.ValidationError on malformed JSON, unknown `type`, or
    missing fields.
    """

    return inbound_message_adapter.validate_json(raw)


class UpdateMessage(BaseModel):
    """Outbound snapshot pushed to every bound player of a session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["update"] = "update"
    players: list[PlayerState]
    current_word: str
    current_speller: str | None

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


# ---- HTTP plumbing ----


class SessionCreateResponse(BaseModel):
    session_id: str


class SessionJoinRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class SessionView(BaseModel):
    session: SessionState
    # The first client to open an empty lobby hosts it (shows the start button).
    is_host: bool


class SessionListResponse(BaseModel):
    session_ids: list[str]

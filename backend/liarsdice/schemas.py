"""Pydantic schemas for socket traffic.

One model per inbound action and one per outbound event. Wire keys are
camelCase to match the browser client.
"""
from __future__ import annotations

from typing import Any, ClassVar, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from liarsdice.errors import ValidationError
from liarsdice.models import Player, Room


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# -----------------------------
# Inbound actions
# -----------------------------

class Action(WireModel):
    event: ClassVar[str]

    room: str

    @classmethod
    def parse(cls, data: Any):
        """Validate a raw socket payload. A bare string is read as the room name."""
        if isinstance(data, str):
            data = {'room': data}
        try:
            return cls.model_validate(data or {})
        except PydanticValidationError as exc:
            raise ValidationError(f"invalid {cls.event} payload: {exc.errors()[0]['msg']}") from exc


class JoinRoom(Action):
    event: ClassVar[str] = 'joinRoom'

    username: str
    is_spectator: bool = False

    def cleaned(self, max_name_length: int) -> 'JoinRoom':
        username = self.username.strip()[:max_name_length]
        room = self.room.strip()
        if not username:
            raise ValidationError('username is required')
        if not room:
            raise ValidationError('room is required')
        return self.model_copy(update={'username': username, 'room': room})


class PlayerReady(Action):
    event: ClassVar[str] = 'playerReady'


class PlaceBid(Action):
    event: ClassVar[str] = 'placeBid'

    quantity: int
    face: int


class CallLiar(Action):
    event: ClassVar[str] = 'callLiar'


# -----------------------------
# Outbound events
# -----------------------------

class PlayerView(WireModel):
    id: str
    username: str
    dice_count: int
    # Only the owner sees their dice, except during the reveal
    dice: Optional[List[int]] = None
    ready: bool
    eliminated: bool
    sitting_out: bool = False

    @classmethod
    def of(cls, player: Player, visible: bool) -> 'PlayerView':
        return cls(
            id=player.id,
            username=player.username,
            dice_count=player.dice_count,
            dice=list(player.dice) if visible else None,
            ready=player.ready,
            eliminated=player.eliminated,
            sitting_out=player.sitting_out,
        )


class SpectatorView(WireModel):
    id: str
    username: str


class BidView(WireModel):
    quantity: int
    face: int
    player: Optional[str] = None


class RoomSnapshot(WireModel):
    event: ClassVar[str] = 'roomUpdate'

    name: str
    phase: str
    players: List[PlayerView]
    spectators: List[SpectatorView]
    current_turn_index: int
    current_turn_id: Optional[str] = None
    current_bid: Optional[BidView] = None
    game_in_progress: bool
    game_active: bool
    round_number: int
    dice_in_play: int
    last_result: Optional[str] = None

    @classmethod
    def of(cls, room: Room, viewer_id: Optional[str] = None, reveal: bool = False) -> 'RoomSnapshot':
        current = room.current_player
        bid = room.current_bid
        return cls(
            name=room.name,
            phase=room.phase,
            players=[PlayerView.of(p, reveal or p.id == viewer_id) for p in room.players],
            spectators=[SpectatorView(id=s.id, username=s.username) for s in room.spectators.values()],
            current_turn_index=room.turn_index,
            current_turn_id=current.id if current else None,
            current_bid=BidView(quantity=bid.quantity, face=bid.face, player=bid.player_id) if bid else None,
            game_in_progress=room.game_in_progress,
            game_active=room.game_active,
            round_number=room.round_number,
            dice_in_play=room.dice_in_play,
            last_result=room.last_result,
        )


class RoundOverEvent(WireModel):
    event: ClassVar[str] = 'roundOver'

    all_players: List[PlayerView]
    message: str
    count: int
    face: int
    quantity: int
    bid_true: bool
    loser: str


class GameOverEvent(WireModel):
    event: ClassVar[str] = 'gameOver'

    winner: Optional[str] = None
    winner_id: Optional[str] = None


class NotificationEvent(WireModel):
    event: ClassVar[str] = 'notification'

    message: str


class ErrorEvent(WireModel):
    event: ClassVar[str] = 'error'

    message: str


class RoomSummary(WireModel):
    name: str
    phase: str
    player_count: int
    spectator_count: int

    @classmethod
    def of(cls, room: Room) -> 'RoomSummary':
        return cls(
            name=room.name,
            phase=room.phase,
            player_count=len(room.players),
            spectator_count=len(room.spectators),
        )

from flask import current_app, request
from flask_socketio import join_room, leave_room
from typing import Dict, Optional

from liarsdice.errors import IllegalAction, InvariantViolation, ValidationError
from liarsdice.models import Room
from liarsdice.schemas import (
    CallLiar,
    ErrorEvent,
    GameOverEvent,
    JoinRoom,
    NotificationEvent,
    PlaceBid,
    PlayerReady,
    PlayerView,
    RoomSnapshot,
    RoundOverEvent,
    WireModel,
)
from liarsdice.services.games.engine import ChallengeResult, GameResult


def _channel(room_name: str) -> str:
    return f"room:{room_name}"


class SessionGateway:
    """Maps socket actions onto the round engine and broadcasts the results.

    Owns the connection -> room lookup. Game fields are only ever mutated
    through the engine, with the room lock held.
    """

    def __init__(self, socketio, registry, engine, scheduler, config, namespace: str = '/'):
        self.socketio = socketio
        self.registry = registry
        self.engine = engine
        self.scheduler = scheduler
        self.namespace = namespace
        self.max_name_length = int(config.get('MAX_NAME_LENGTH', 24))
        self.reveal_duration = float(config.get('REVEAL_DURATION_SEC', 5))
        self.game_over_duration = float(config.get('GAME_OVER_DURATION_SEC', 5))
        self._sid_to_room: Dict[str, str] = {}

    # ---- Emit helpers ----

    def _emit(self, model: WireModel, to: str, event: Optional[str] = None) -> None:
        self.socketio.emit(event or model.event, model.to_wire(), to=to, namespace=self.namespace)

    def _notify(self, room: Room, message: str) -> None:
        self._emit(NotificationEvent(message=message), to=_channel(room.name))

    def broadcast_room(self, room: Room, event: str = 'roomUpdate') -> None:
        """Send each member a snapshot showing only their own dice."""
        for member_id in room.member_ids():
            self._emit(RoomSnapshot.of(room, viewer_id=member_id), to=member_id, event=event)

    def _room_for(self, action_room: str) -> Optional[Room]:
        room_name = self._sid_to_room.get(request.sid)
        if room_name is None or room_name != action_room:
            return None
        return self.registry.get(room_name)

    # ---- Connection lifecycle ----

    def handle_connect(self, auth=None):
        current_app.logger.debug(f"[connect] sid={request.sid}")

    def handle_disconnect(self, reason=None):
        current_app.logger.debug(f"[disconnect] sid={request.sid} reason={reason}")
        self._leave_current(request.sid)

    def _leave_current(self, sid: str) -> None:
        room_name = self._sid_to_room.pop(sid, None)
        if room_name is None:
            return
        room = self.registry.get(room_name)
        if room is None:
            return
        with room.lock:
            try:
                result = self.engine.leave(room, sid)
            except InvariantViolation as exc:
                self._force_reset(room, exc)
                return
            if result is None:
                return
            if room.is_empty:
                self.registry.remove(room.name)
                return
            self._notify(room, f"{result.player.username} left the room.")
            if result.started:
                self.scheduler.cancel(room)
                self.broadcast_room(room, event='gameStarted')
            elif result.game is not None:
                self._finish_match(room, result.game)
                return
            self.broadcast_room(room)

    # ---- Inbound actions ----

    def handle_join_room(self, data):
        try:
            action = JoinRoom.parse(data).cleaned(self.max_name_length)
        except ValidationError as exc:
            self._emit(ErrorEvent(message=str(exc)), to=request.sid)
            return

        sid = request.sid
        if sid in self._sid_to_room:
            old_room = self._sid_to_room[sid]
            leave_room(_channel(old_room))
            self._leave_current(sid)

        while True:
            room = self.registry.get_or_create(action.room)
            with room.lock:
                # The last member may have left (and the room been dropped)
                # while we waited on the lock
                if self.registry.get(room.name) is not room:
                    current_app.logger.debug(f"[join-retry] room={room.name} sid={sid}")
                    continue
                self._seat(room, sid, action)
                return

    def _seat(self, room: Room, sid: str, action: JoinRoom) -> None:
        if room.has_username(action.username):
            self._emit(ErrorEvent(message=f"Name {action.username} is already taken in this room"), to=sid)
            return
        join_room(_channel(room.name))
        self._sid_to_room[sid] = room.name
        self.engine.join(room, sid, action.username, is_spectator=action.is_spectator)
        role = 'is watching' if action.is_spectator else 'joined the room'
        self._notify(room, f"{action.username} {role}.")
        self.broadcast_room(room)

    def handle_player_ready(self, data):
        room = self._parse_and_lookup(PlayerReady, data)
        if room is None:
            return
        with room.lock:
            try:
                started = self.engine.ready(room, request.sid)
            except IllegalAction as exc:
                self._drop('playerReady', room, exc)
                return
            except InvariantViolation as exc:
                self._force_reset(room, exc)
                return
            if started:
                self.scheduler.cancel(room)
                self.broadcast_room(room, event='gameStarted')
            self.broadcast_room(room)

    def handle_place_bid(self, data):
        try:
            action = PlaceBid.parse(data)
        except ValidationError as exc:
            current_app.logger.debug(f"[bid-drop] sid={request.sid} {exc}")
            return
        room = self._room_for(action.room)
        if room is None:
            return
        with room.lock:
            try:
                self.engine.place_bid(room, request.sid, action.quantity, action.face)
            except IllegalAction as exc:
                self._drop('placeBid', room, exc)
                return
            except InvariantViolation as exc:
                self._force_reset(room, exc)
                return
            self.broadcast_room(room)

    def handle_call_liar(self, data):
        room = self._parse_and_lookup(CallLiar, data)
        if room is None:
            return
        with room.lock:
            try:
                result = self.engine.challenge(room, request.sid)
            except IllegalAction as exc:
                self._drop('callLiar', room, exc)
                return
            except InvariantViolation as exc:
                self._force_reset(room, exc)
                return
            self._announce_challenge(room, result)

    def _parse_and_lookup(self, model, data) -> Optional[Room]:
        try:
            action = model.parse(data)
        except ValidationError as exc:
            current_app.logger.debug(f"[action-drop] sid={request.sid} {exc}")
            return None
        return self._room_for(action.room)

    def _drop(self, event: str, room: Room, exc: IllegalAction) -> None:
        current_app.logger.debug(f"[action-drop] room={room.name} sid={request.sid} event={event} reason={exc}")

    # ---- Transitions ----

    def _announce_challenge(self, room: Room, result: ChallengeResult) -> None:
        payload = RoundOverEvent(
            all_players=[PlayerView.of(p, visible=True) for p in room.players],
            message=result.message,
            count=result.count,
            face=result.bid.face,
            quantity=result.bid.quantity,
            bid_true=result.bid_true,
            loser=result.loser_name,
        )
        self._emit(payload, to=_channel(room.name))
        for name in result.eliminated:
            self._notify(room, f"{name} is out of the game!")
        if result.game_over:
            self._finish_match(room, result.game)
        else:
            self.scheduler.schedule(room, 'next_round', self.reveal_duration, self._next_round)

    def _next_round(self, room: Room) -> None:
        if room.game_active or not room.game_in_progress:
            current_app.logger.info(f"[timer-skip] room={room.name} phase={room.phase}")
            return
        try:
            self.engine.start_round(room)
        except InvariantViolation as exc:
            self._force_reset(room, exc)
            return
        self.broadcast_room(room, event='gameStarted')
        self.broadcast_room(room)

    def _finish_match(self, room: Room, game: GameResult) -> None:
        if game.degenerate:
            current_app.logger.warning(f"[game-over] room={room.name} ended with no winner")
        self._emit(GameOverEvent(winner=game.winner_name, winner_id=game.winner_id), to=_channel(room.name))
        self.engine.reset_room(room)
        self.scheduler.schedule(room, 'lobby_reset', self.game_over_duration, self._lobby_reset)

    def _lobby_reset(self, room: Room) -> None:
        if room.game_in_progress:
            return
        self.broadcast_room(room)

    def _force_reset(self, room: Room, exc: InvariantViolation) -> None:
        current_app.logger.error(f"[invariant] room={room.name} {exc}; resetting to lobby")
        self.scheduler.cancel(room)
        self.engine.reset_room(room)
        self._notify(room, 'The game was reset.')
        self.broadcast_room(room)


def register_socketio_handlers(socketio, gateway: SessionGateway, namespace: str = '/') -> None:
    """Register Socket.IO event handlers for the gateway on ``namespace``."""
    socketio.on_event('connect', gateway.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', gateway.handle_disconnect, namespace=namespace)
    socketio.on_event(JoinRoom.event, gateway.handle_join_room, namespace=namespace)
    socketio.on_event(PlayerReady.event, gateway.handle_player_ready, namespace=namespace)
    socketio.on_event(PlaceBid.event, gateway.handle_place_bid, namespace=namespace)
    socketio.on_event(CallLiar.event, gateway.handle_call_liar, namespace=namespace)

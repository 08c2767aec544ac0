"""Round engine: the Liar's Dice state machine for a single room.

Phases: lobby -> bidding -> reveal -> bidding ... -> game over -> lobby.

The engine mutates Room and Player state only; it never talks to the
transport. Callers broadcast snapshots and schedule the delayed
transitions (next round, lobby reset) based on the results returned here.

Challenge rule: if the standing bid is true the challenger loses one die,
otherwise the bidder does. The last player holding dice wins the match.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from liarsdice.errors import IllegalAction, InvariantViolation
from liarsdice.models import Bid, Player, Room
from .bidding import is_legal
from .dice import count_matches, roll

log = logging.getLogger(__name__)


@dataclass
class GameResult:
    winner_id: Optional[str]
    winner_name: Optional[str]

    @property
    def degenerate(self) -> bool:
        return self.winner_id is None


@dataclass
class ChallengeResult:
    bid: Bid
    challenger_id: str
    count: int
    bid_true: bool
    loser_id: str
    loser_name: str
    eliminated: List[str] = field(default_factory=list)
    game: Optional[GameResult] = None

    @property
    def game_over(self) -> bool:
        return self.game is not None

    @property
    def message(self) -> str:
        verdict = 'The bid stands' if self.bid_true else 'Liar!'
        return (
            f"Result: There were {self.count} {self.bid.face}s (1s are wild) against a bid of "
            f"{self.bid.quantity}. {verdict} {self.loser_name} lost a die!"
        )


@dataclass
class LeaveResult:
    player: Player
    was_spectator: bool = False
    started: bool = False
    game: Optional[GameResult] = None


class RoundEngine:
    def __init__(self, starting_dice: int = 4, min_players: int = 2, rng: Optional[random.Random] = None):
        if starting_dice < 1:
            raise ValueError('starting_dice must be at least 1')
        self.starting_dice = starting_dice
        self.min_players = max(2, min_players)
        self.rng = rng or random.Random()

    # ---- Lobby ----

    def join(self, room: Room, player_id: str, username: str, is_spectator: bool = False) -> Player:
        """Seat a player (or spectator) in the room.

        Players joining while a match is running sit out with no dice until
        the next match.
        """
        if is_spectator:
            player = Player(player_id, username, is_spectator=True)
            room.spectators[player_id] = player
        else:
            dice_count = 0 if room.game_in_progress else self.starting_dice
            player = Player(player_id, username, dice_count=dice_count)
            player.sitting_out = room.game_in_progress
            room.players.append(player)
        log.info(f"[join] room={room.name} player={username} spectator={is_spectator} phase={room.phase}")
        return player

    def ready(self, room: Room, player_id: str) -> bool:
        """Mark a player ready. Returns True if this started the match."""
        if room.game_in_progress:
            raise IllegalAction('match already in progress')
        player = room.find_player(player_id)
        if player is None:
            raise IllegalAction('only seated players can ready up')
        player.ready = True
        log.info(f"[ready] room={room.name} player={player.username}")
        return self._maybe_start_match(room)

    def quorum_reached(self, room: Room) -> bool:
        return len(room.players) >= self.min_players and all(p.ready for p in room.players)

    def _maybe_start_match(self, room: Room) -> bool:
        if room.game_in_progress or not self.quorum_reached(room):
            return False
        room.game_in_progress = True
        room.round_number = 0
        room.turn_index = 0
        log.info(f"[match-start] room={room.name} players={len(room.players)}")
        self.start_round(room)
        return True

    # ---- Rounds ----

    def start_round(self, room: Room) -> None:
        """Deal fresh hands and open the bidding window."""
        if room.game_active:
            raise IllegalAction('round already active')
        if not room.game_in_progress:
            raise IllegalAction('no match in progress')
        for p in room.players:
            p.dice = roll(p.dice_count, self.rng) if p.has_dice else []
        room.current_bid = None
        room.last_result = None
        room.turn_index = self._live_index_from(room, room.turn_index, include_start=True)
        room.round_number += 1
        room.game_active = True
        log.info(
            f"[round-start] room={room.name} round={room.round_number} "
            f"turn={room.players[room.turn_index].username} dice_in_play={room.dice_in_play}"
        )

    def _live_index_from(self, room: Room, start: int, include_start: bool) -> int:
        """Index of the first player holding dice at or after ``start``, wrapping.

        Searches at most one full cycle.
        """
        n = len(room.players)
        offset = 0 if include_start else 1
        for step in range(n):
            idx = (start + offset + step) % n
            if room.players[idx].has_dice:
                return idx
        raise InvariantViolation(f"no player with dice in room {room.name}")

    def _require_turn(self, room: Room, player_id: str) -> Player:
        if not room.game_active:
            raise IllegalAction('bidding is closed')
        current = room.current_player
        if current is None or current.id != player_id:
            raise IllegalAction('not your turn')
        return current

    def place_bid(self, room: Room, player_id: str, quantity: int, face: int) -> Bid:
        self._require_turn(room, player_id)
        proposed = Bid(quantity, face, player_id)
        if not is_legal(proposed, room.current_bid, room.dice_in_play):
            raise IllegalAction(f"bid {quantity}x{face} does not beat {room.current_bid}")
        room.current_bid = proposed
        room.turn_index = self._live_index_from(room, room.turn_index, include_start=False)
        return proposed

    def challenge(self, room: Room, player_id: str) -> ChallengeResult:
        """Call liar on the standing bid, reveal and apply the penalty.

        Leaves the room in the reveal phase (or, on game over, still in
        progress for the caller to reset).
        """
        self._require_turn(room, player_id)
        bid = room.current_bid
        if bid is None:
            raise IllegalAction('no bid to challenge')
        room.game_active = False

        count = count_matches((p.dice for p in room.players), bid.face)
        bid_true = count >= bid.quantity
        loser_idx = room.index_of(player_id if bid_true else bid.player_id)
        if loser_idx < 0:
            raise InvariantViolation(f"challenge loser missing from room {room.name}")
        loser = room.players[loser_idx]
        loser.dice_count -= 1

        result = ChallengeResult(
            bid=bid,
            challenger_id=player_id,
            count=count,
            bid_true=bid_true,
            loser_id=loser.id,
            loser_name=loser.username,
        )
        if not loser.has_dice:
            loser.eliminated = True
            result.eliminated.append(loser.username)
        room.last_result = result.message
        log.info(
            f"[challenge] room={room.name} bid={bid.quantity}x{bid.face} count={count} "
            f"true={bid_true} loser={loser.username} left={loser.dice_count}"
        )

        result.game = self.check_game_over(room)
        if result.game is None:
            # Loser opens the next round, or the next live player if they're out
            room.turn_index = self._live_index_from(room, loser_idx, include_start=True)
        return result

    def check_game_over(self, room: Room) -> Optional[GameResult]:
        live = room.live_players
        if len(live) > 1:
            return None
        if live:
            winner = live[0]
            log.info(f"[game-over] room={room.name} winner={winner.username}")
            return GameResult(winner.id, winner.username)
        log.warning(f"[game-over] room={room.name} no players left holding dice")
        return GameResult(None, None)

    def reset_room(self, room: Room) -> None:
        """Return the room to the lobby with fresh dice counts."""
        for p in room.players:
            p.dice_count = self.starting_dice
            p.dice = []
            p.ready = False
            p.eliminated = False
            p.sitting_out = False
        room.current_bid = None
        room.turn_index = 0
        room.round_number = 0
        room.game_in_progress = False
        room.game_active = False
        log.info(f"[reset] room={room.name}")

    # ---- Membership ----

    def leave(self, room: Room, player_id: str) -> Optional[LeaveResult]:
        """Remove a player or spectator, keeping the turn cursor consistent."""
        spectator = room.spectators.pop(player_id, None)
        if spectator is not None:
            return LeaveResult(spectator, was_spectator=True)

        idx = room.index_of(player_id)
        if idx < 0:
            return None
        player = room.players.pop(idx)
        result = LeaveResult(player)
        log.info(f"[leave] room={room.name} player={player.username} phase={room.phase}")

        if idx < room.turn_index:
            room.turn_index -= 1
        if room.players:
            room.turn_index %= len(room.players)
        else:
            room.turn_index = 0

        if not room.game_in_progress:
            result.started = self._maybe_start_match(room)
            return result

        if room.current_bid is not None and room.current_bid.player_id == player_id:
            room.current_bid = None

        result.game = self.check_game_over(room)
        if result.game is None and room.game_active:
            room.turn_index = self._live_index_from(room, room.turn_index, include_start=True)
        return result

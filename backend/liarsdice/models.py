import threading
from typing import Dict, List, Optional


class Bid:
    """A claim that at least ``quantity`` dice show ``face`` (1s are wild)."""

    __slots__ = ('quantity', 'face', 'player_id')

    def __init__(self, quantity: int, face: int, player_id: Optional[str] = None):
        self.quantity = quantity
        self.face = face
        self.player_id = player_id

    def __eq__(self, other):
        if not isinstance(other, Bid):
            return NotImplemented
        return (self.quantity, self.face, self.player_id) == (other.quantity, other.face, other.player_id)

    def __repr__(self):
        return f"Bid(quantity={self.quantity}, face={self.face}, player_id={self.player_id!r})"

    def to_dict(self):
        return {
            'quantity': self.quantity,
            'face': self.face,
            'player': self.player_id,
        }


class Player:
    def __init__(self, id: str, username: str, dice_count: int = 0, is_spectator: bool = False):
        self.id = id
        self.username = username
        self.dice: List[int] = []
        self.dice_count = 0 if is_spectator else dice_count
        self.ready = False
        self.eliminated = False
        # Joined mid-match; holds no dice until the next match
        self.sitting_out = False
        self.is_spectator = is_spectator

    @property
    def has_dice(self) -> bool:
        return self.dice_count > 0

    def __repr__(self):
        return f"Player(id={self.id!r}, username={self.username!r}, dice_count={self.dice_count})"


class Room:
    """Runtime state for one named table.

    ``players`` is the fixed turn cycle; ``spectators`` never hold dice or a turn.
    """

    def __init__(self, name: str):
        self.name = name
        self.players: List[Player] = []
        self.spectators: Dict[str, Player] = {}
        self.turn_index = 0
        self.current_bid: Optional[Bid] = None
        # A match has begun (ready quorum reached)
        self.game_in_progress = False
        # The bidding window of a round is open
        self.game_active = False
        self.round_number = 0
        self.last_result: Optional[str] = None
        # Pending delayed transition, owned by the scheduler
        self.timer = None
        self.lock = threading.RLock()

    @property
    def phase(self) -> str:
        if not self.game_in_progress:
            return 'lobby'
        return 'bidding' if self.game_active else 'reveal'

    @property
    def current_player(self) -> Optional[Player]:
        if not self.game_active or not self.players:
            return None
        return self.players[self.turn_index % len(self.players)]

    @property
    def live_players(self) -> List[Player]:
        return [p for p in self.players if p.has_dice]

    @property
    def dice_in_play(self) -> int:
        return sum(p.dice_count for p in self.players if p.has_dice)

    @property
    def is_empty(self) -> bool:
        return not self.players and not self.spectators

    def member_ids(self) -> List[str]:
        return [p.id for p in self.players] + list(self.spectators)

    def find_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def index_of(self, player_id: str) -> int:
        for idx, p in enumerate(self.players):
            if p.id == player_id:
                return idx
        return -1

    def has_username(self, username: str) -> bool:
        lowered = username.lower()
        members = list(self.players) + list(self.spectators.values())
        return any(m.username.lower() == lowered for m in members)

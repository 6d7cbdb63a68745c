"""Game snapshot and lobby helpers.

A :class:`GameSnapshot` is the complete state of one room. It is treated as
a value: engines clone it, mutate the clone and publish the clone whole.
Participants replace their copy wholesale on receipt.
"""
import copy
import random
import secrets
import string
from dataclasses import dataclass, field
from typing import Optional

from racko.game.deck import build_deck, deal_racks, deck_size
from racko.game.errors import RoomFull
from racko.game.player import Player
from racko.utils.logger import get_logger

logger = get_logger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6


@dataclass
class GameSnapshot:
    """Complete state of one game instance."""
    
    room_code: str
    max_players: int
    use_ai: bool = False
    players: list[Player] = field(default_factory=list)
    pending_racks: list[list[int]] = field(default_factory=list)  # Racks for unfilled seats
    draw_pile: list[int] = field(default_factory=list)
    discard_pile: list[int] = field(default_factory=list)
    current_turn: int = 0
    winner: Optional[str] = None
    practice_mode: bool = False
    round_number: int = 1
    move_number: int = 0
    
    def clone(self) -> "GameSnapshot":
        """Deep structural copy sharing no lists with this snapshot."""
        return copy.deepcopy(self)
    
    @property
    def deck_size(self) -> int:
        """Deck size for this room's seat count."""
        return deck_size(self.max_players)
    
    @property
    def is_full(self) -> bool:
        """Check if every seat is taken."""
        return len(self.players) >= self.max_players
    
    @property
    def is_playable(self) -> bool:
        """Turns are only taken once seats are filled (or opponents are AI)."""
        return self.is_full or self.use_ai
    
    @property
    def current_player(self) -> Optional[Player]:
        """Player whose turn it is."""
        if 0 <= self.current_turn < len(self.players):
            return self.players[self.current_turn]
        return None
    
    @property
    def discard_top(self) -> Optional[int]:
        """Visible card on the discard pile."""
        return self.discard_pile[-1] if self.discard_pile else None
    
    def get_player(self, player_id: str) -> Optional[Player]:
        """Get a player by ID.
        
        Args:
            player_id: Player's ID.
            
        Returns:
            Player if seated.
        """
        for player in self.players:
            if player.id == player_id:
                return player
        return None
    
    def is_turn_of(self, player_id: str) -> bool:
        """Check if it is ``player_id``'s turn."""
        current = self.current_player
        return self.is_playable and current is not None and current.id == player_id
    
    def advance_turn(self) -> None:
        """Move the turn pointer to the next seat."""
        self.current_turn = (self.current_turn + 1) % len(self.players)
    
    def all_cards(self) -> list[int]:
        """Every card held anywhere in the snapshot (for invariant checks)."""
        cards = [c for p in self.players for c in p.rack]
        cards += [c for rack in self.pending_racks for c in rack]
        return cards + self.draw_pile + self.discard_pile
    
    def redeal(self, rng: Optional[random.Random] = None) -> None:
        """Deal a fresh round in place.
        
        Seated players keep id, name, score and AI flag. Open seats get fresh
        pending racks so the whole deck stays partitioned.
        """
        racks, draw_pile, discard_pile = deal_racks(build_deck(self.max_players, rng), self.max_players)
        for player, rack in zip(self.players, racks):
            player.receive_rack(rack)
        
        self.pending_racks = [list(r) for r in racks[len(self.players):]]
        self.draw_pile = draw_pile
        self.discard_pile = discard_pile
        self.current_turn = 0
        self.winner = None
        self.round_number += 1
    
    def to_dict(self) -> dict:
        """Serialize the full snapshot."""
        return {
            "room_code": self.room_code,
            "max_players": self.max_players,
            "use_ai": self.use_ai,
            "players": [p.to_dict() for p in self.players],
            "pending_racks": [list(r) for r in self.pending_racks],
            "draw_pile": list(self.draw_pile),
            "discard_pile": list(self.discard_pile),
            "current_turn": self.current_turn,
            "winner": self.winner,
            "practice_mode": self.practice_mode,
            "round_number": self.round_number,
            "move_number": self.move_number,
        }
    
    def to_view(self, player_id: str) -> dict:
        """Serialize from one player's perspective.
        
        Opponent racks are hidden unless the room is in practice mode.
        """
        data = self.to_dict()
        data["players"] = [
            p.to_dict(hide_rack=not self.practice_mode and p.id != player_id)
            for p in self.players
        ]
        data.pop("pending_racks")
        data["draw_pile"] = len(self.draw_pile)
        return data
    
    @classmethod
    def from_dict(cls, data: dict) -> "GameSnapshot":
        """Restore a snapshot from its serialized form."""
        return cls(
            room_code=data["room_code"],
            max_players=data["max_players"],
            use_ai=data.get("use_ai", False),
            players=[Player.from_dict(p) for p in data.get("players", [])],
            pending_racks=[list(r) for r in data.get("pending_racks", [])],
            draw_pile=list(data.get("draw_pile", [])),
            discard_pile=list(data.get("discard_pile", [])),
            current_turn=data.get("current_turn", 0),
            winner=data.get("winner"),
            practice_mode=data.get("practice_mode", False),
            round_number=data.get("round_number", 1),
            move_number=data.get("move_number", 0),
        )


# Lobby helpers

def generate_room_code() -> str:
    """Generate a six character room code."""
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def generate_player_id() -> str:
    """Generate a player identifier."""
    return f"p_{secrets.token_hex(6)}"


def create_game(
    name: str,
    player_count: int,
    use_ai: bool = False,
    practice_mode: bool = False,
    room_code: Optional[str] = None,
    player_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> GameSnapshot:
    """Create the initial snapshot for a new room.
    
    The creator takes seat 0. With ``use_ai`` every other seat is filled by a
    computer player; otherwise their racks wait in ``pending_racks`` until
    someone joins.
    
    Args:
        name: Creator's display name.
        player_count: Number of seats (2-4).
        use_ai: Fill the other seats with computer players.
        practice_mode: Reveal opponent racks.
        room_code: Room code, generated if not given.
        player_id: Creator's ID, generated if not given.
        rng: Optional random source for the shuffle.
        
    Returns:
        The new snapshot.
    """
    racks, draw_pile, discard_pile = deal_racks(build_deck(player_count, rng), player_count)
    
    players = [Player(id=player_id or generate_player_id(), name=name, rack=racks[0])]
    pending: list[list[int]] = []
    
    for seat, rack in enumerate(racks[1:], start=1):
        if use_ai:
            players.append(Player(id=f"ai_{seat}", name=f"AI {seat}", rack=list(rack), is_ai=True))
        else:
            pending.append(list(rack))
    
    snapshot = GameSnapshot(
        room_code=room_code or generate_room_code(),
        max_players=player_count,
        use_ai=use_ai,
        players=players,
        pending_racks=pending,
        draw_pile=draw_pile,
        discard_pile=discard_pile,
        practice_mode=practice_mode,
    )
    logger.info(
        f"Created room {snapshot.room_code} ({player_count} players, "
        f"{'AI' if use_ai else 'human'} opponents)"
    )
    return snapshot


def seat_player(snapshot: GameSnapshot, player_id: str, name: str) -> Player:
    """Seat a late joiner on the next pending rack.
    
    Args:
        snapshot: Snapshot to modify in place.
        player_id: Joiner's ID.
        name: Joiner's display name.
        
    Returns:
        The seated player.
        
    Raises:
        RoomFull: If every seat is taken.
    """
    if snapshot.is_full or not snapshot.pending_racks:
        raise RoomFull(f"Room {snapshot.room_code} is full")
    
    player = Player(id=player_id, name=name, rack=snapshot.pending_racks.pop(0))
    snapshot.players.append(player)
    logger.info(f"{name} joined room {snapshot.room_code} at seat {len(snapshot.players) - 1}")
    return player


def status_message(snapshot: GameSnapshot, player_id: str) -> str:
    """One-line status for a participant.
    
    Args:
        snapshot: Current snapshot.
        player_id: Viewing participant.
        
    Returns:
        Status text.
    """
    if not snapshot.is_playable:
        return f"Waiting for {snapshot.max_players - len(snapshot.players)} more..."
    
    if snapshot.winner:
        if snapshot.winner == player_id:
            return "You win!"
        winner = snapshot.get_player(snapshot.winner)
        return f"{winner.name if winner else 'Someone'} wins!"
    
    if snapshot.is_turn_of(player_id):
        return "Your turn!"
    
    current = snapshot.current_player
    return f"{current.name if current else 'Someone'}'s turn..."

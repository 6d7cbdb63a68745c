"""Player model."""
from dataclasses import dataclass, field

from racko.game.rack import score, is_winning


@dataclass
class Player:
    """A seated player and their rack."""
    
    id: str
    name: str
    rack: list[int] = field(default_factory=list)
    score: int = 0  # Rounds won
    is_ai: bool = False
    
    def replace_card(self, position: int, card: int) -> int:
        """Put a card into the rack.
        
        Args:
            position: Rack index to overwrite.
            card: Incoming card.
            
        Returns:
            The displaced card.
        """
        displaced = self.rack[position]
        self.rack[position] = card
        return displaced
    
    def receive_rack(self, rack: list[int]) -> None:
        """Take a freshly dealt rack (copied, never shared)."""
        self.rack = list(rack)
    
    @property
    def rack_score(self) -> int:
        """Ordering score of the current rack."""
        return score(self.rack)
    
    @property
    def has_won(self) -> bool:
        """Check if the rack is in winning order."""
        return is_winning(self.rack)
    
    def to_dict(self, hide_rack: bool = False) -> dict:
        """Convert to dictionary for serialization.
        
        Args:
            hide_rack: If True, don't include the rack.
            
        Returns:
            Player state dictionary.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "score": self.score,
            "is_ai": self.is_ai,
        }
        
        if not hide_rack:
            data["rack"] = list(self.rack)
        
        return data
    
    @classmethod
    def from_dict(cls, data: dict) -> "Player":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            rack=list(data.get("rack", [])),
            score=data.get("score", 0),
            is_ai=data.get("is_ai", False),
        )

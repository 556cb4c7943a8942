from abc import ABC, abstractmethod
from typing import Optional
from ..core.bitboard import Color
from ..core.game_tree import GameNode


class BasePlayer(ABC):
    """Abstract base class for all player types."""

    def __init__(self, name: str, color: Color):
        """
        Initialize player.

        Args:
            name: Human-readable name for the player
            color: Side the player moves (Color.WHITE or Color.BLACK)
        """
        self.name = name
        self.color = color

    @abstractmethod
    def get_move(self, node: GameNode) -> Optional[GameNode]:
        """
        Choose the next board from the current node.

        Args:
            node: Current node of the game tree, with this player to move

        Returns:
            The chosen child node, or None if no move is available
        """
        pass

    def get_name(self) -> str:
        return self.name

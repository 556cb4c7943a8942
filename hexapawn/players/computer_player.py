import random
from typing import Optional
from .base_player import BasePlayer
from ..core.bitboard import Color
from ..core.game_tree import GameNode, pick_random_child


class ComputerPlayer(BasePlayer):
    """
    Learning opponent. Picks uniformly among the moves it has not yet
    forgotten; all of its strength comes from pruning the tree.
    """

    def __init__(self, name: str = "Computer", color: Color = Color.BLACK,
                 rng: Optional[random.Random] = None):
        super().__init__(name, color)
        self.rng = rng if rng is not None else random.Random()

    def get_move(self, node: GameNode) -> Optional[GameNode]:
        if node.position.turn is not self.color:
            raise ValueError(f"Not {self.name}'s turn (current: {node.position.turn.name}, expected: {self.color.name})")
        return pick_random_child(node, self.rng)

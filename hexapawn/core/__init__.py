from .bitboard import BitBoard, Color
from .game_tree import GameNode, generate, pick_random_child, find_legal_child, prune
from .move import Move, MoveDerivationError, derive_move, apply_move

__all__ = ['BitBoard', 'Color', 'GameNode', 'generate', 'pick_random_child', 'find_legal_child',
           'prune', 'Move', 'MoveDerivationError', 'derive_move', 'apply_move']

"""
The Hexapawn game tree.

Every position reachable from the start is generated once, eagerly, and
kept in memory. The computer's "skill" comes only from pruning children
that led to a loss; there is no search or evaluation.
"""

import logging
import random
from collections import deque
from typing import Iterator, List, Optional, Tuple

from .bitboard import BitBoard

logger = logging.getLogger(__name__)


class GameNode:
    """Node in the game tree. A node without children is a victory board."""

    __slots__ = ("position", "children", "record_id")

    def __init__(self, position: BitBoard, children: Optional[List["GameNode"]] = None):
        self.position = position
        self.children: List["GameNode"] = children if children is not None else []
        # Row id in the persisted forest; only the store reads or writes it
        self.record_id: Optional[int] = None

    def is_victory(self) -> bool:
        """True when the side to move has lost (no moves left)."""
        return len(self.children) == 0

    def add_child(self, child: "GameNode") -> "GameNode":
        self.children.append(child)
        return child

    def __repr__(self) -> str:
        return f"GameNode({self.position!r}, children={len(self.children)})"


def generate(start: BitBoard) -> GameNode:
    """
    Build the complete game tree below start.

    Positions reached along different move sequences get their own
    nodes; nothing is deduplicated. Expansion uses an explicit stack so
    tree depth never touches the interpreter's recursion limit.
    """
    root = GameNode(start)
    stack = [root]
    count = 0
    while stack:
        node = stack.pop()
        count += 1
        for position in node.position.successors():
            stack.append(node.add_child(GameNode(position)))
    logger.debug("Generated game tree with %d nodes", count)
    return root


def pick_random_child(node: GameNode, rng: random.Random) -> Optional[GameNode]:
    """Uniformly random child of node, or None if node is a victory board."""
    if not node.children:
        return None
    return node.children[rng.randrange(len(node.children))]


def find_legal_child(node: GameNode, candidate: BitBoard) -> Optional[GameNode]:
    """
    Look up candidate among node's children. A proposed board is a legal
    move exactly when it matches one of them.
    """
    for child in node.children:
        if child.position == candidate:
            return child
    return None


def prune(parent: GameNode, child: BitBoard) -> int:
    """
    Remove every child of parent whose board matches child.

    Returns:
        Number of children removed (0 when nothing matched).
    """
    before = len(parent.children)
    parent.children = [node for node in parent.children if node.position != child]
    return before - len(parent.children)


def iter_nodes(root: GameNode) -> Iterator[GameNode]:
    """Breadth-first walk over the tree."""
    queue = deque([root])
    while queue:
        node = queue.popleft()
        yield node
        queue.extend(node.children)


def iter_edges(root: GameNode) -> Iterator[Tuple[GameNode, GameNode]]:
    """Breadth-first walk over (parent, child) pairs."""
    for node in iter_nodes(root):
        for child in node.children:
            yield node, child


def count_nodes(root: GameNode) -> int:
    return sum(1 for _ in iter_nodes(root))


def max_depth(root: GameNode) -> int:
    """Length in plies of the longest root-to-leaf path."""
    deepest = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in node.children)
    return deepest


def signature(root: GameNode):
    """
    Hashable structural fingerprint of a tree: the same boards, turns and
    branching (children compared as a multiset) give the same value.
    Built bottom-up without recursion.
    """
    order = list(iter_nodes(root))
    prints = {}
    for node in reversed(order):
        children = tuple(sorted((prints[id(child)] for child in node.children), key=repr))
        position = node.position
        prints[id(node)] = (position.black, position.white, int(position.turn), children)
    return prints[id(root)]

import graphviz
from collections import deque
from .core.bitboard import Color
from .core.game_tree import GameNode
from .core.move import derive_move

NODE_LIMIT = 400  # Maximum number of nodes to display in the tree visualization


# builds a graph of the game tree below root, breadth-first, up to node_limit boards
def tree_visualization(root: GameNode, node_limit: int = NODE_LIMIT) -> graphviz.Digraph:
    graph = graphviz.Digraph(format="png")
    graph.attr("node", shape="box", fontname="Courier New")  # Monospace font for the boards

    queue = deque([(root, None)])
    node_count = 0

    while queue and node_count < node_limit:
        node, parent = queue.popleft()
        node_id = str(id(node))
        node_count += 1

        label = (
            f"{node.position.turn.name.title()} to move\\n"
            f"children: {len(node.children)}\\n"
        )
        label += str(node.position).replace("\n", "\\n")

        if node.is_victory():
            # Winner is the side that just moved
            winner = node.position.turn.opponent()
            fill_color = "lightgreen" if winner is Color.WHITE else "lightcoral"
            graph.node(node_id, label=label, style="bold,filled", penwidth="3",
                       fillcolor=fill_color, color="black")
        elif node.position.turn is Color.BLACK:
            # Boards where the computer chooses
            graph.node(node_id, label=label, style="filled", fillcolor="lightgrey")
        else:
            graph.node(node_id, label=label)

        if parent is not None:
            move = derive_move(parent.position, node.position)
            graph.edge(str(id(parent)), node_id, label=str(move))

        for child in node.children:
            queue.append((child, node))

    return graph


def render_tree(root: GameNode, file_name: str = "game_tree", node_limit: int = NODE_LIMIT) -> str:
    graph = tree_visualization(root, node_limit=node_limit)
    path = graph.render(file_name, cleanup=True)
    print(f"Tree visualization saved as {path}")
    return path

from hexapawn.db import Database
from hexapawn.settings_loader import DB_PATH, NODE_LIMIT
from hexapawn.tree_view import render_tree

# python query.py --reset | --tree
if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Hexapawn Query Script")
    parser.add_argument("--db", default=DB_PATH)
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Mark every board active again, erasing what the computer learned (default: False)",
    )
    parser.add_argument(
        "--reset-stats",
        action="store_true",
        help="Zero the saved games played and wins (default: False)",
    )
    parser.add_argument(
        "--tree",
        action="store_true",
        help="Render the active game tree with graphviz (default: False)",
    )
    args = parser.parse_args()

    db = Database(args.db)

    print(f"Boards in the database '{args.db}': {db.get_count()}")
    print(f"Active boards: {db.get_count(active_only=True)}")
    print(f"Computer losses: {db.count_white_wins()} ({db.count_white_wins(active_only=True)} still active)")
    print(f"Computer skill: {db.get_skill()}%")
    games_played, white_wins = db.load_stats()
    print(f"Games played: {games_played} (white {white_wins}, black {games_played - white_wins})")

    orphans = db.check_consistency()
    if orphans:
        print(f"WARNING: {len(orphans)} active boards below inactive parents")

    if args.reset:
        input_val = input("Are you sure you want to reset the computer's learning? (yes/no): ")
        if input_val.lower() in ["yes", "y"]:
            print(f"Reactivated {db.reset_all_active()} boards.")
        else:
            print("Operation cancelled.")

    if args.reset_stats:
        db.reset_stats()
        print("Game statistics reset.")

    if args.tree:
        root = db.load_active_tree()
        if root is None:
            print("No game tree stored yet.")
        else:
            render_tree(root, node_limit=NODE_LIMIT)

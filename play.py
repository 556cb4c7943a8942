#!/usr/bin/env python3
"""
Play Hexapawn in the terminal against the learning computer.

You play white (bottom row) and move first. Enter moves as two squares,
e.g. "b1 b2" or "a2xb3". Every game you win teaches the computer to
avoid the move that lost it.
"""

import argparse
import random
import time

from hexapawn.core.move import Move
from hexapawn.db import Database
from hexapawn.logging_config import setup_logging
from hexapawn.session import GameSession
from hexapawn.settings_loader import DB_PATH, LOG_FILE, LOG_LEVEL, SEED, THINK_TIME


def pretty_print(session):
    print()
    print(session.current.position)
    print()


def print_stats(stats):
    print(f"Games: {stats.games_played}  White wins: {stats.white_wins}  Black wins: {stats.black_wins}")


def play_game(session, think_time):
    session.new_game()
    while True:
        pretty_print(session)
        moves = ", ".join(str(move) for move in session.legal_moves())
        text = input(f"Your move ({moves}) or q to quit: ").strip()
        if text.lower() in {"q", "quit", "exit"}:
            return False
        try:
            move = Move.parse(text)
        except ValueError as e:
            print(e)
            continue

        result = session.human_move(move)
        if not result.legal:
            print(f"Illegal move: {result.error}. Try again.")
            continue

        if result.reply is not None:
            time.sleep(think_time)
            print(f"{session.computer.get_name()} plays {result.reply}.")

        if result.winner is not None:
            pretty_print(session)
            print("You win!" if result.winner == session.human_color.name else "Computer wins.")
            return True


def main():
    parser = argparse.ArgumentParser(description="Hexapawn against a learning computer")
    parser.add_argument("--db", default=DB_PATH, help=f"Board database (default: {DB_PATH})")
    parser.add_argument("--seed", type=int, default=SEED, help="Seed for the computer's choices")
    parser.add_argument("--think-time", type=float, default=THINK_TIME,
                        help=f"Pause before the computer's reply in seconds (default: {THINK_TIME})")
    parser.add_argument("--reset-ai", action="store_true", help="Forget everything the computer has learned")
    parser.add_argument("--reset-stats", action="store_true", help="Zero the saved games played and wins")
    args = parser.parse_args()

    setup_logging(LOG_LEVEL, LOG_FILE)
    rng = random.Random(args.seed)

    with GameSession(Database(args.db), rng=rng) as session:
        if args.reset_ai:
            session.reset_ai()
        if args.reset_stats:
            session.reset_stats()
        print(f"Computer skill: {session.skill()}%")
        print_stats(session.stats)
        while play_game(session, args.think_time):
            print_stats(session.stats)
            print(f"Computer skill: {session.skill()}%")
            again = input("Play again? [Y/n]: ").strip().lower()
            if again in {"n", "no"}:
                break
        session.flush()
    print("Thanks for playing!")


if __name__ == "__main__":
    main()

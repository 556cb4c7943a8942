#!/usr/bin/env python3
"""
Hexapawn Web API Launcher

Run this script to serve the JSON game API for playing Hexapawn against
the learning computer.
"""

import argparse
import random

from hexapawn.db import Database
from hexapawn.logging_config import setup_logging
from hexapawn.session import GameSession
from hexapawn.settings_loader import DB_PATH, LOG_FILE, LOG_LEVEL, SEED
from hexapawn.web import create_app

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Hexapawn web API")
    parser.add_argument("--db", default=DB_PATH)
    parser.add_argument("--port", type=int, default=5000)
    args = parser.parse_args()

    setup_logging(LOG_LEVEL, LOG_FILE)
    session = GameSession(Database(args.db), rng=random.Random(SEED))
    session.start()
    app = create_app(session)

    print("Hexapawn Web API")
    print("=" * 40)
    print(f"Listening on http://127.0.0.1:{args.port}/api/game_state")
    print("Press Ctrl+C to stop the server")
    print("=" * 40)

    try:
        app.run(debug=False, host='127.0.0.1', port=args.port)
    finally:
        session.close()

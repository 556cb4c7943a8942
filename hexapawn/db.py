"""
SQLite mirror of the game tree.

Every board of the generated tree is stored once as a row linked to its
parent row (parent = 0 for the root). Pruning never deletes rows: it
clears their `active` flag, and only active rows are loaded back, which
is how forgotten moves stay forgotten across restarts.
"""

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Dict, List, NamedTuple, Optional, Tuple

from .core.bitboard import BitBoard, Color
from .core.game_tree import GameNode
from .skill import skill_percentage

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Persisted encoding of the side to move
TURN_CODES = {Color.BLACK: 0, Color.WHITE: 1}
TURN_COLORS = {code: color for color, code in TURN_CODES.items()}


class PersistenceError(Exception):
    """A store operation failed; callers may fall back to regeneration."""


class TreeRecord(NamedTuple):
    """One board of a tree, flattened for insertion. parent indexes the record list, -1 for the root."""
    node: GameNode
    parent: int
    black: int
    white: int
    turn: int
    victory: int


def snapshot_tree(root: GameNode) -> List[TreeRecord]:
    """
    Flatten the tree below root in preorder, parents before children and
    siblings in generation order. Victory flags are taken now, so later
    pruning of the in-memory tree does not change what gets stored.
    """
    records = []
    stack = [(root, -1)]
    while stack:
        node, parent = stack.pop()
        position = node.position
        records.append(TreeRecord(node, parent, position.black, position.white,
                                  TURN_CODES[position.turn], 1 if node.is_victory() else 0))
        index = len(records) - 1
        stack.extend((child, index) for child in reversed(node.children))
    return records


class Database:
    def __init__(self, db_path: str, table_name: str = "boards"):
        self.db_path = db_path
        self.table_name = table_name
        self.stats_table = f"{table_name}_stats"
        # Single writer: every operation, reads included, holds this lock
        self._lock = threading.RLock()
        self.setup()

    @contextmanager
    def _connect(self):
        try:
            conn = sqlite3.connect(self.db_path, timeout=10)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open {self.db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            logger.error("Database error on %s: %s", self.db_path, e)
            raise PersistenceError(str(e)) from e
        finally:
            conn.close()

    def setup(self):
        """Create the boards and stats tables, or migrate boards left by an older schema."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self._lock:
            with self._connect() as conn:
                with conn:
                    self._create_stats_table(conn)
                exists = self._table_exists(conn)
                version = conn.execute("PRAGMA user_version").fetchone()[0]
                if not exists:
                    with conn:
                        self._create_table(conn)
                    return
            if version < SCHEMA_VERSION:
                self.migrate()

    def _table_exists(self, conn) -> bool:
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name = ?",
            (self.table_name,),
        ).fetchone()
        return row is not None

    def _create_table(self, conn):
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table_name} (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                black INTEGER NOT NULL,
                white INTEGER NOT NULL,
                turn INTEGER NOT NULL,
                parent INTEGER NOT NULL,
                victory INTEGER NOT NULL,
                active INTEGER NOT NULL DEFAULT 1
            )
            """
        )
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS {self.table_name}_parent_idx ON {self.table_name} (parent)"
        )
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS {self.table_name}_position_idx "
            f"ON {self.table_name} (black, white, turn)"
        )
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    def _create_stats_table(self, conn):
        # A single row, id 1, holds the running totals
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.stats_table} (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                games_played INTEGER NOT NULL,
                white_wins INTEGER NOT NULL
            )
            """
        )

    def migrate(self):
        """
        Rebuild the table for the current schema: load the active tree,
        drop the old table, recreate it and insert the tree again.
        """
        with self._lock:
            try:
                root = self.load_active_tree()
            except PersistenceError:
                logger.warning("Could not read old boards table; starting from an empty store")
                root = None
            with self._connect() as conn:
                with conn:
                    conn.execute(f"DROP TABLE IF EXISTS {self.table_name}")
                    self._create_table(conn)
            if root is not None:
                self.bulk_insert(root)
            logger.info("Migrated %s to schema version %d", self.db_path, SCHEMA_VERSION)

    def has_tree(self) -> bool:
        """True if a root board has been stored."""
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT EXISTS(SELECT 1 FROM {self.table_name} WHERE parent = 0)"
            ).fetchone()
            return row[0] == 1

    def bulk_insert(self, root: GameNode) -> int:
        """Store the whole tree below root in one transaction. See insert_records."""
        return self.insert_records(snapshot_tree(root))

    def insert_records(self, records: List[TreeRecord]) -> int:
        """
        Store a flattened tree in one transaction. Each board is linked to
        its parent's row id, and record_id is set on every snapshotted node,
        including nodes pruned from the live tree since the snapshot.

        Returns:
            Number of rows inserted.
        """
        ids: List[int] = []
        with self._lock, self._connect() as conn:
            if self.has_tree():
                raise PersistenceError(f"{self.db_path} already holds a game tree")
            with conn:
                cursor = conn.cursor()
                for record in records:
                    parent_id = ids[record.parent] if record.parent >= 0 else 0
                    cursor.execute(
                        f"""
                        INSERT INTO {self.table_name} (black, white, turn, parent, victory, active)
                        VALUES (?, ?, ?, ?, ?, 1)
                        """,
                        (record.black, record.white, record.turn, parent_id, record.victory),
                    )
                    if cursor.rowcount == 0:
                        raise PersistenceError("Failed to insert board into the database.")
                    ids.append(cursor.lastrowid)
            # Ids are published once the transaction has committed
            for record, record_id in zip(records, ids):
                record.node.record_id = record_id
        logger.info("Stored %d boards in %s", len(ids), self.db_path)
        return len(ids)

    def load_active_tree(self) -> Optional[GameNode]:
        """
        Rebuild the game tree from active rows, following parent links
        down from the root. Returns None if no active root row exists.
        """
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT id, black, white, turn, parent
                FROM {self.table_name}
                WHERE active = 1
                ORDER BY id ASC
                """
            ).fetchall()

        children_by_parent: Dict[int, List[tuple]] = {}
        for row in rows:
            children_by_parent.setdefault(row[4], []).append(row)

        roots = children_by_parent.get(0)
        if not roots:
            logger.info("No active root board found in %s", self.db_path)
            return None

        root = self._decode_row(roots[0])
        stack = [root]
        count = 0
        while stack:
            node = stack.pop()
            count += 1
            for row in children_by_parent.get(node.record_id, []):
                stack.append(node.add_child(self._decode_row(row)))
        logger.info("Loaded %d active boards from %s", count, self.db_path)
        return root

    def _decode_row(self, row) -> GameNode:
        id, black, white, turn, _parent = row
        node = GameNode(BitBoard(black, white, TURN_COLORS[turn]))
        node.record_id = id
        return node

    def find_record_id(self, position: BitBoard) -> Optional[int]:
        """First row matching the board exactly (pawns and side to move), active rows first."""
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT id FROM {self.table_name}
                WHERE black = ? AND white = ? AND turn = ?
                ORDER BY active DESC, id ASC
                LIMIT 1
                """,
                (position.black, position.white, TURN_CODES[position.turn]),
            ).fetchone()
        return row[0] if row else None

    def deactivate_subtree(self, position: BitBoard, record_id: Optional[int] = None) -> int:
        """
        Mark a board and everything below it inactive.

        The row is the one given by record_id when the caller knows it,
        otherwise the first row matching the board and side to move. The
        descendants are cleared level by level over parent links and the
        matched row last, all in one transaction.

        Returns:
            Number of rows deactivated (0 if the board was not found).
        """
        with self._lock:
            if record_id is None:
                record_id = self.find_record_id(position)
            if record_id is None:
                logger.warning("No stored board matches %r; nothing to prune", position)
                return 0

            affected = 0
            with self._connect() as conn:
                with conn:
                    cursor = conn.cursor()
                    frontier = [record_id]
                    while frontier:
                        next_frontier = []
                        for parent_id in frontier:
                            cursor.execute(
                                f"UPDATE {self.table_name} SET active = 0 WHERE parent = ? AND active = 1",
                                (parent_id,),
                            )
                            affected += cursor.rowcount
                            cursor.execute(
                                f"SELECT id FROM {self.table_name} WHERE parent = ?",
                                (parent_id,),
                            )
                            next_frontier.extend(child_id for (child_id,) in cursor.fetchall())
                        frontier = next_frontier

                    cursor.execute(
                        f"UPDATE {self.table_name} SET active = 0 WHERE id = ? AND active = 1",
                        (record_id,),
                    )
                    affected += cursor.rowcount
        logger.info("Deactivated %d boards below record %d", affected, record_id)
        return affected

    def reset_all_active(self) -> int:
        """Mark every board active again, discarding everything learned."""
        with self._lock, self._connect() as conn:
            with conn:
                cursor = conn.execute(f"UPDATE {self.table_name} SET active = 1 WHERE active = 0")
                restored = cursor.rowcount
        logger.info("Reactivated %d boards in %s", restored, self.db_path)
        return restored

    def count_white_wins(self, active_only: bool = False) -> int:
        """Victory boards with black to move, i.e. boards where the computer lost."""
        query = f"SELECT COUNT(*) FROM {self.table_name} WHERE victory = 1 AND turn = ?"
        if active_only:
            query += " AND active = 1"
        with self._lock, self._connect() as conn:
            return conn.execute(query, (TURN_CODES[Color.BLACK],)).fetchone()[0]

    def get_skill(self) -> int:
        total = self.count_white_wins()
        active = self.count_white_wins(active_only=True)
        return skill_percentage(total, active)

    def get_count(self, active_only: bool = False) -> int:
        query = f"SELECT COUNT(*) FROM {self.table_name}"
        if active_only:
            query += " WHERE active = 1"
        with self._lock, self._connect() as conn:
            return conn.execute(query).fetchone()[0]

    def check_consistency(self) -> List[int]:
        """
        Ids of active rows whose parent row is inactive. A completed
        cascade never leaves any.
        """
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT child.id FROM {self.table_name} AS child
                JOIN {self.table_name} AS parent ON child.parent = parent.id
                WHERE child.active = 1 AND parent.active = 0
                """
            ).fetchall()
        return [row[0] for row in rows]

    def load_stats(self) -> Tuple[int, int]:
        """(games_played, white_wins) saved by earlier sessions; zeros if none."""
        with self._lock, self._connect() as conn:
            row = conn.execute(
                f"SELECT games_played, white_wins FROM {self.stats_table} WHERE id = 1"
            ).fetchone()
        return (row[0], row[1]) if row else (0, 0)

    def save_stats(self, games_played: int, white_wins: int):
        if not 0 <= white_wins <= games_played:
            raise ValueError(f"White wins {white_wins} outside 0..{games_played}")
        with self._lock, self._connect() as conn:
            with conn:
                conn.execute(
                    f"INSERT OR REPLACE INTO {self.stats_table} (id, games_played, white_wins) VALUES (1, ?, ?)",
                    (games_played, white_wins),
                )

    def reset_stats(self):
        self.save_stats(0, 0)
        logger.info("Reset game statistics in %s", self.db_path)

import sqlite3
import pytest
from hexapawn.core.bitboard import BitBoard, Color
from hexapawn.core.game_tree import count_nodes, generate, iter_nodes, prune, signature
from hexapawn.db import Database, PersistenceError, snapshot_tree
from conftest import follow


def computer_losses(node):
    return sum(1 for n in iter_nodes(node) if n.is_victory() and n.position.turn is Color.BLACK)


class TestDatabase:

    def test_empty_store(self, db):
        assert not db.has_tree()
        assert db.load_active_tree() is None
        assert db.get_count() == 0
        assert db.get_skill() == 0

    def test_bulk_insert(self, db, tree):
        inserted = db.bulk_insert(tree)
        assert inserted == count_nodes(tree)
        assert db.has_tree()
        assert db.get_count() == inserted
        ids = [node.record_id for node in iter_nodes(tree)]
        assert None not in ids
        assert len(set(ids)) == len(ids)

    def test_second_insert_rejected(self, db, tree):
        db.bulk_insert(tree)
        with pytest.raises(PersistenceError):
            db.bulk_insert(generate(BitBoard.initial()))

    def test_load_round_trip(self, db, tree):
        db.bulk_insert(tree)
        loaded = db.load_active_tree()
        assert signature(loaded) == signature(tree)
        # Siblings come back in generation order
        assert [child.position for child in loaded.children] == [child.position for child in tree.children]

    def test_victory_flags(self, db, tree):
        db.bulk_insert(tree)
        assert db.count_white_wins() == computer_losses(tree)
        assert db.count_white_wins(active_only=True) == computer_losses(tree)

    def test_deactivate_subtree(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        removed = db.deactivate_subtree(losing.position, losing.record_id)
        assert removed == count_nodes(losing)
        assert db.get_count(active_only=True) == count_nodes(tree) - removed
        assert db.check_consistency() == []

        expected = generate(BitBoard.initial())
        prune(follow(expected, ["b1-b2"]), losing.position)
        assert signature(db.load_active_tree()) == signature(expected)

    def test_deactivate_by_board(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        assert db.deactivate_subtree(losing.position) == count_nodes(losing)
        assert db.check_consistency() == []

    def test_deactivate_twice(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        db.deactivate_subtree(losing.position, losing.record_id)
        assert db.deactivate_subtree(losing.position, losing.record_id) == 0

    def test_deactivate_unknown_board(self, db, tree):
        db.bulk_insert(tree)
        assert db.deactivate_subtree(BitBoard(0b1, 0b10, Color.WHITE)) == 0
        assert db.get_count(active_only=True) == count_nodes(tree)

    def test_skill(self, db, tree):
        db.bulk_insert(tree)
        assert db.get_skill() == 0
        losing = follow(tree, ["b1-b2", "a3-a2"])
        db.deactivate_subtree(losing.position, losing.record_id)
        total = computer_losses(tree)
        assert db.get_skill() == int(computer_losses(losing) / total * 100.0)
        assert db.get_skill() > 0

    def test_reset_all_active(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        removed = db.deactivate_subtree(losing.position, losing.record_id)
        assert db.reset_all_active() == removed
        assert signature(db.load_active_tree()) == signature(tree)
        assert db.get_skill() == 0

    def test_pruning_survives_reopen(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        db.deactivate_subtree(losing.position, losing.record_id)

        reopened = Database(db.db_path)
        node = follow(reopened.load_active_tree(), ["b1-b2"])
        assert len(node.children) == 3

    def test_migrate_old_schema(self, db, tree):
        db.bulk_insert(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        db.deactivate_subtree(losing.position, losing.record_id)
        active = db.get_count(active_only=True)
        before = signature(db.load_active_tree())

        conn = sqlite3.connect(db.db_path)
        conn.execute("PRAGMA user_version = 0")
        conn.commit()
        conn.close()

        migrated = Database(db.db_path)
        # Only the active tree is carried over
        assert migrated.get_count() == active
        assert signature(migrated.load_active_tree()) == before

    def test_unreadable_store(self, tmp_path):
        path = tmp_path / "broken.db"
        path.write_bytes(b"this is not a database" * 100)
        with pytest.raises(PersistenceError):
            Database(str(path))

    def test_creates_directory(self, tmp_path):
        db = Database(str(tmp_path / "nested" / "dir" / "boards.db"))
        assert not db.has_tree()

    def test_snapshot_ignores_later_pruning(self, db, tree):
        records = snapshot_tree(tree)
        losing = follow(tree, ["b1-b2", "a3-a2"])
        prune(follow(tree, ["b1-b2"]), losing.position)

        assert db.insert_records(records) == len(records)
        assert db.get_count() == count_nodes(generate(BitBoard.initial()))
        # Pruned nodes still learn their row, so they can be deactivated
        assert losing.record_id is not None
        assert db.deactivate_subtree(losing.position, losing.record_id) == count_nodes(losing)
        assert signature(db.load_active_tree()) == signature(tree)

    def test_snapshot_order(self, tree):
        records = snapshot_tree(tree)
        assert records[0].node is tree
        assert records[0].parent == -1
        assert all(record.parent < index for index, record in enumerate(records))


class TestStats:

    def test_no_saved_stats(self, db):
        assert db.load_stats() == (0, 0)

    def test_save_and_reopen(self, db):
        db.save_stats(5, 2)
        assert Database(db.db_path).load_stats() == (5, 2)

    def test_reset(self, db):
        db.save_stats(5, 2)
        db.reset_stats()
        assert db.load_stats() == (0, 0)

    def test_invalid_totals(self, db):
        with pytest.raises(ValueError):
            db.save_stats(1, 2)

"""Tests for the database initialization script."""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from peewee import SqliteDatabase

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cipher_dex.scripts import init_db


class InitDbTests(unittest.TestCase):
    def test_creates_tables_and_seeds_pools(self):
        with tempfile.TemporaryDirectory() as tmp:
            db_path = Path(tmp) / "dex.db"

            init_db.main([f"sqlite:///{db_path}"])

            database = SqliteDatabase(str(db_path))
            database.connect()
            try:
                self.assertEqual(
                    set(database.get_tables()),
                    {"pools", "balances", "transactions", "limit_orders"},
                )
                self.assertEqual(database.execute_sql("SELECT COUNT(*) FROM pools").fetchone()[0], 3)
            finally:
                database.close()

            # Running again does not duplicate the seed pools
            init_db.main([f"sqlite:///{db_path}"])
            database = SqliteDatabase(str(db_path))
            try:
                self.assertEqual(database.execute_sql("SELECT COUNT(*) FROM pools").fetchone()[0], 3)
            finally:
                database.close()

    def test_url_resolution_order(self):
        self.assertEqual(init_db.resolve_database_url(["sqlite:///cli.db"]), "sqlite:///cli.db")

        with mock.patch.dict(os.environ, {"DATABASE_URL": "sqlite:///env.db"}):
            self.assertEqual(init_db.resolve_database_url([]), "sqlite:///env.db")

        env = {k: v for k, v in os.environ.items() if k != "DATABASE_URL"}
        with mock.patch.dict(os.environ, env, clear=True):
            self.assertEqual(init_db.resolve_database_url([]), "sqlite:///cipher_dex.db")


if __name__ == "__main__":
    unittest.main()

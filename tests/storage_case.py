import os
import sys
import tempfile
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from db import database as db_database  # noqa: E402


class StorageTestCase(unittest.IsolatedAsyncioTestCase):
    """Points local storage at a fresh temporary file for every test."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "nested", "storage.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_garbage_storage(self):
        """Replace the storage file with bytes SQLite cannot open."""
        os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
        with open(self.db_path, "wb") as f:
            f.write(b"definitely not a sqlite database\n" * 128)

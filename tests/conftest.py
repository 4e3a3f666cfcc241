import os

import pytest

from gazeta.adapters.sqlite.migrator import SQLiteMigrator


@pytest.fixture
def test_data_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture
def db_path(test_data_dir):
    """A migrated, empty SQLite database."""
    path = os.path.join(test_data_dir, "gazeta.db")
    SQLiteMigrator(path).run_migrations()
    return path

from pathlib import Path

import pytest

from byteletters.adapters.auth.crypto import BcryptPasswordHasher
from byteletters.adapters.sqlite.migrator import SQLiteMigrator
from byteletters.adapters.sqlite.repos import SQLiteUserStore

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def migrations_dir() -> str:
    return str(PROJECT_ROOT / "byteletters" / "migrations")


@pytest.fixture
def db_path(tmp_path, migrations_dir):
    """A migrated, empty SQLite database."""
    path = str(tmp_path / "byteletters.db")
    SQLiteMigrator(path, migrations_dir).run_migrations()
    return path


@pytest.fixture
def user_store(db_path):
    store = SQLiteUserStore.open(db_path)
    yield store
    store.close()


@pytest.fixture
def fast_hasher() -> BcryptPasswordHasher:
    # Minimum cost keeps the suite fast; production uses 12 rounds
    return BcryptPasswordHasher(rounds=4)

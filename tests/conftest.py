import pytest

from finsight import db


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    """Point the storage layer at a fresh SQLite file."""
    monkeypatch.setattr(db, 'DB_PATH_STR', str(tmp_path / 'finsight.db'))
    db.init_db()
    return db

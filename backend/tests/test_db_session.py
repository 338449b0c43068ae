"""
Database Session Tests

Per-request sessions are closed and released; the health check reports the
backend in use.
"""

from tradejournal.db.models import User
from tradejournal.db.session import check_db_health, close_db_session, get_db


class TestSessionHelpers:
    def test_close_releases_registry(self):
        db = get_db()
        db.add(User(email="session@example.com", password_hash="x"))
        db.commit()

        close_db_session(db)
        close_db_session(db)

        fresh = get_db()
        assert fresh is not db
        assert fresh.query(User).filter(User.email == "session@example.com").count() == 1
        close_db_session(fresh)

    def test_uncommitted_work_is_discarded(self):
        db = get_db()
        db.add(User(email="dropped@example.com", password_hash="x"))
        db.flush()
        close_db_session(db)

        fresh = get_db()
        assert fresh.query(User).filter(User.email == "dropped@example.com").count() == 0
        close_db_session(fresh)

    def test_health(self):
        health = check_db_health()

        assert health["healthy"] is True
        assert health["backend"] == "sqlite"
        assert health["latency_ms"] >= 0

# Overview: Pytest coverage for session expiry and the lazy sweep.

"""
Session Expiry Tests

A session is valid strictly before its expiry instant. Expired rows are
swept on every lookup, for every user.
"""

from datetime import timedelta

import pytest

from pshop.models import SessionToken
from pshop.services import session_service, user_service


@pytest.fixture
def clock(monkeypatch):
    """Controllable utcnow for the session service."""
    state = {'now': None}
    real = session_service.utcnow

    def fake_now():
        return state['now'] if state['now'] is not None else real()

    monkeypatch.setattr(session_service, 'utcnow', fake_now)
    return state


@pytest.fixture
def user(db_session):
    return user_service.create_user('alice', 'x' * 60, 'alice')


class TestSessionExpiry:
    def test_expiry_is_24_hours_after_creation(self, user, clock):
        session, _ = session_service.create_session(user.id, user.username)
        assert session.expires_at - session.created_at == timedelta(hours=24)

    def test_valid_until_just_before_expiry(self, user, clock):
        session, token = session_service.create_session(user.id, user.username)
        expires_at = session.expires_at

        clock['now'] = expires_at - timedelta(seconds=1)
        assert session_service.find_valid_session(token) is not None

        clock['now'] = expires_at
        assert session_service.find_valid_session(token) is None

    def test_boundary_row_survives_until_strictly_past(self, user, clock, db_session):
        session, token = session_service.create_session(user.id, user.username)
        expires_at = session.expires_at

        clock['now'] = expires_at
        session_service.find_valid_session(token)
        assert db_session.query(SessionToken).count() == 1

        clock['now'] = expires_at + timedelta(seconds=1)
        session_service.find_valid_session(token)
        assert db_session.query(SessionToken).count() == 0

    def test_lookup_sweeps_other_users_sessions(self, user, clock, db_session):
        other = user_service.create_user('bob', 'x' * 60, 'bob')
        _, stale_token = session_service.create_session(other.id, other.username)

        clock['now'] = session_service.utcnow() + timedelta(hours=25)
        _, fresh_token = session_service.create_session(user.id, user.username)

        assert session_service.find_valid_session(fresh_token) is not None
        remaining = db_session.query(SessionToken).all()
        assert [s.user_id for s in remaining] == [user.id]

    def test_purge_returns_count(self, user, clock):
        session_service.create_session(user.id, user.username)
        clock['now'] = session_service.utcnow() + timedelta(days=2)

        assert session_service.purge_expired_sessions() == 1
        assert session_service.purge_expired_sessions() == 0

    def test_unknown_and_empty_tokens(self, user):
        assert session_service.find_valid_session(None) is None
        assert session_service.find_valid_session('') is None
        assert session_service.find_valid_session('0' * 64) is None

    def test_delete_session_reports_removal(self, user):
        _, token = session_service.create_session(user.id, user.username)

        assert session_service.delete_session(token) is True
        assert session_service.delete_session(token) is False

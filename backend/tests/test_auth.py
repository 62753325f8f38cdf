# Overview: Pytest coverage for register/login/reset/logout and session checks.

"""
Authentication Tests

Covers the /api/auth actions end to end and the auth_service rules that
sit behind them: admin code gate, case-insensitive usernames, one live
session per login, and the audit trail.
"""

import hashlib

from sqlalchemy.exc import SQLAlchemyError

from conftest import ADMIN_CODE, PASSWORD, auth_headers, login, register
from pshop.models import SecurityEvent, SessionToken, User
from pshop.services import session_service, user_service


class TestRegister:
    def test_register_returns_user_and_session(self, client, db_session):
        response = register(client, 'Alice')

        assert response.status_code == 200
        body = response.json
        assert body['success'] is True
        assert body['data']['user']['username'] == 'alice'
        assert body['data']['user']['displayName'] == 'Alice'
        assert len(body['data']['session']['id']) == 64
        assert body['data']['session']['userId'] == body['data']['user']['id']

    def test_session_token_is_stored_hashed(self, client, db_session):
        token = register(client, 'alice').json['data']['session']['id']

        stored = db_session.query(SessionToken).one()
        assert stored.token_hash == hashlib.sha256(token.encode()).hexdigest()
        assert stored.token_hash != token

    def test_username_is_case_insensitive(self, client, db_session):
        register(client, 'alice')
        response = register(client, 'ALICE')

        assert response.status_code == 400
        assert response.json['error'] == 'conflict'
        assert db_session.query(User).count() == 1

    def test_wrong_admin_code_is_forbidden(self, client, db_session):
        response = register(client, 'alice', admin_code='nope')

        assert response.status_code == 400
        assert response.json['error'] == 'forbidden'
        assert db_session.query(User).count() == 0

    def test_short_username(self, client, db_session):
        response = register(client, 'al')
        assert response.status_code == 400
        assert response.json['error'] == 'too_short'

    def test_short_password(self, client, db_session):
        response = register(client, 'alice', password='12345')
        assert response.status_code == 400
        assert response.json['error'] == 'too_short'

    def test_missing_field(self, client, db_session):
        response = client.post('/api/auth?action=register', json={'username': 'alice', 'password': PASSWORD})
        assert response.status_code == 400
        assert response.json['error'] == 'validation'

    def test_unknown_action(self, client, db_session):
        response = client.post('/api/auth?action=impersonate', json={})
        assert response.status_code == 400
        assert response.json['success'] is False

    def test_denied_registration_is_audited(self, client, db_session):
        register(client, 'alice', admin_code='nope')

        event = db_session.query(SecurityEvent).filter_by(event_type='REGISTER_DENIED').one()
        assert event.success is False
        assert event.action == 'alice'

    def test_taken_username_is_audited(self, client, db_session):
        register(client, 'alice')
        register(client, 'Alice')

        event = db_session.query(SecurityEvent).filter_by(event_type='REGISTER_DENIED').one()
        assert event.success is False
        assert event.action == 'alice'
        assert event.reason == 'Username taken'

    def test_account_survives_session_failure(self, client, db_session, monkeypatch):
        def broken_session(user_id, username):
            raise SQLAlchemyError('sessions table unavailable')

        monkeypatch.setattr(session_service, 'create_session', broken_session)
        response = register(client, 'alice')
        monkeypatch.undo()

        assert response.status_code == 200
        assert response.json['data']['session'] is None
        assert response.json['message'] == 'Account created. Please log in.'
        assert db_session.query(User).filter_by(username='alice').count() == 1
        assert login(client, 'alice').status_code == 200


class TestLogin:
    def test_login_success(self, client, db_session):
        register(client, 'alice')
        response = login(client, 'Alice')

        assert response.status_code == 200
        assert response.json['data']['user']['username'] == 'alice'
        assert response.json['data']['session']['expiresAt'].endswith('Z')

    def test_login_invalidates_previous_sessions(self, client, db_session):
        first = register(client, 'alice').json['data']['session']['id']
        second = login(client, 'alice').json['data']['session']['id']

        assert first != second
        stale = client.get('/api/auth?action=check-session', headers=auth_headers(first))
        fresh = client.get('/api/auth?action=check-session', headers=auth_headers(second))
        assert stale.status_code == 401
        assert fresh.status_code == 200
        assert db_session.query(SessionToken).count() == 1

    def test_wrong_password_and_unknown_user_look_the_same(self, client, db_session):
        register(client, 'alice')
        wrong = login(client, 'alice', password='not-the-password')
        unknown = login(client, 'nobody')

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json['error'] == unknown.json['error'] == 'invalid_credentials'
        assert wrong.json['message'] == unknown.json['message']

    def test_failed_logins_are_audited(self, client, db_session):
        register(client, 'alice')
        login(client, 'alice', password='not-the-password')
        login(client, 'nobody')

        events = db_session.query(SecurityEvent).filter_by(event_type='LOGIN_FAILED').all()
        assert {e.action for e in events} == {'alice', 'nobody'}

    def test_legacy_sha256_hash_is_upgraded(self, client, db_session):
        legacy = hashlib.sha256(PASSWORD.encode()).hexdigest()
        user = user_service.create_user('carol', legacy, 'Carol')

        response = login(client, 'carol')

        assert response.status_code == 200
        db_session.expire_all()
        upgraded = db_session.get(User, user.id).password_hash
        assert upgraded.startswith('$2')
        # The upgraded hash still verifies
        assert login(client, 'carol').status_code == 200


class TestSessionLifecycle:
    def test_check_session(self, client, user_a):
        response = client.get('/api/auth?action=check-session', headers=user_a['headers'])

        assert response.status_code == 200
        assert response.json['data'] == {'authenticated': True, 'user': user_a['user']}

    def test_check_session_accepts_query_parameter(self, client, user_a):
        response = client.get(f"/api/auth?action=check-session&sessionId={user_a['token']}")
        assert response.status_code == 200

    def test_check_session_without_token(self, client, db_session):
        response = client.get('/api/auth?action=check-session')

        assert response.status_code == 401
        assert response.json['data'] == {'authenticated': False, 'user': None}

    def test_logout_revokes_session(self, client, user_a):
        assert client.post('/api/auth?action=logout', headers=user_a['headers']).status_code == 200

        response = client.get('/api/data?resource=products', headers=user_a['headers'])
        assert response.status_code == 401
        assert response.json['error'] == 'unauthenticated'

    def test_logout_is_idempotent(self, client, db_session):
        response = client.get('/api/auth?action=logout', headers=auth_headers('f' * 64))
        assert response.status_code == 200
        assert response.json['success'] is True

    def test_has_users(self, client, db_session):
        assert client.get('/api/auth?action=has-users').json['data'] == {'hasUsers': False}
        register(client, 'alice')
        assert client.get('/api/auth?action=has-users').json['data'] == {'hasUsers': True}

    def test_deleting_user_removes_sessions(self, client, user_a, db_session):
        db_session.delete(db_session.get(User, user_a['user']['id']))
        db_session.commit()

        assert db_session.query(SessionToken).count() == 0


class TestResetPassword:
    def _reset(self, client, username='alice', new_password='brand-new-pass', admin_code=ADMIN_CODE):
        return client.post('/api/auth?action=reset-password', json={
            'username': username,
            'newPassword': new_password,
            'adminCode': admin_code,
        })

    def test_reset_changes_password_and_signs_out(self, client, user_a):
        response = self._reset(client)

        assert response.status_code == 200
        assert client.get('/api/auth?action=check-session', headers=user_a['headers']).status_code == 401
        assert login(client, 'alice').status_code == 401
        assert login(client, 'alice', password='brand-new-pass').status_code == 200

    def test_reset_with_wrong_code(self, client, user_a):
        response = self._reset(client, admin_code='nope')

        assert response.status_code == 400
        assert response.json['error'] == 'forbidden'
        assert login(client, 'alice').status_code == 200

    def test_reset_unknown_user(self, client, db_session):
        response = self._reset(client, username='ghost')

        assert response.status_code == 404
        assert response.json['error'] == 'not_found'

        event = db_session.query(SecurityEvent).filter_by(event_type='PASSWORD_RESET_DENIED').one()
        assert event.success is False
        assert event.action == 'ghost'
        assert event.reason == 'Unknown username'

    def test_reset_short_password(self, client, user_a):
        response = self._reset(client, new_password='123')
        assert response.json['error'] == 'too_short'

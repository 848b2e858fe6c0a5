"""Pytest fixtures for authsession tests."""
import asyncio
import itertools

import pytest

from authsession import SessionManager
from authsession.core.api import APIConfig, ApiResponse
from authsession.core.exceptions import NetworkFailure
from authsession.core.tokens import MemoryTokenStore, TokenPair


class FakeBackend:
    """
    In-memory stand-in for AsyncAPIClient speaking the /auth contract.

    Access tokens are ``access-N`` and refresh tokens ``refresh-N``.
    Tests expire or revoke them to drive the refresh paths.
    """

    def __init__(self):
        self.config = APIConfig.default()
        self.users = {
            'a@b.com': {
                'password': 'secret123',
                'profile': {'id': 1, 'username': 'alice', 'email': 'a@b.com', 'role': 'user'},
            },
        }
        self.valid_access = {}
        self.valid_refresh = {}
        self.calls = []
        self.refresh_calls = 0
        self.logout_calls = []
        self.refresh_delay = 0.0
        self.rotate_refresh = False
        self.network_down = False
        self.logout_fails = False
        self.closed = False
        self._counter = itertools.count(1)

    # Token helpers

    def issue(self, email: str = 'a@b.com') -> TokenPair:
        n = next(self._counter)
        pair = TokenPair(f"access-{n}", f"refresh-{n}")
        self.valid_access[pair.access_token] = email
        self.valid_refresh[pair.refresh_token] = email
        return pair

    def expire_access_tokens(self):
        self.valid_access.clear()

    def revoke_refresh_tokens(self):
        self.valid_refresh.clear()

    def calls_to(self, path: str) -> list:
        return [call for call in self.calls if call[1] == path]

    # Transport interface

    async def send(self, request, access_token=None):
        self.calls.append((request.method, request.path, access_token))
        await asyncio.sleep(0)
        if self.network_down:
            raise NetworkFailure("Network error: connection refused")

        route = (request.method, request.path)
        body = request.json or {}

        if route == ('POST', '/auth/login'):
            account = self.users.get(body.get('email'))
            if account is None or account['password'] != body.get('password'):
                return ApiResponse(401, {'error': 'invalid email or password'})
            return ApiResponse(200, self._auth_body(body['email']))

        if route == ('POST', '/auth/register'):
            if body.get('email') in self.users:
                return ApiResponse(409, {
                    'error': 'registration failed',
                    'errors': {'email': 'email already registered'},
                })
            self.users[body['email']] = {
                'password': body['password'],
                'profile': {
                    'id': len(self.users) + 1,
                    'username': body['username'],
                    'email': body['email'],
                    'role': 'user',
                },
            }
            return ApiResponse(201, self._auth_body(body['email']))

        if route == ('POST', '/auth/refresh'):
            self.refresh_calls += 1
            if self.refresh_delay:
                await asyncio.sleep(self.refresh_delay)
            email = self.valid_refresh.get(body.get('refresh_token'))
            if email is None:
                return ApiResponse(401, {'error': 'invalid refresh token'})
            n = next(self._counter)
            access = f"access-{n}"
            self.valid_access[access] = email
            if self.rotate_refresh:
                del self.valid_refresh[body['refresh_token']]
                refresh = f"refresh-{n}"
                self.valid_refresh[refresh] = email
                return ApiResponse(200, {'access_token': access, 'refresh_token': refresh})
            return ApiResponse(200, {'access_token': access, 'expires_in': 900})

        if route == ('POST', '/auth/logout'):
            self.logout_calls.append(body.get('refresh_token'))
            if self.logout_fails:
                return ApiResponse(500, {'error': 'database error'})
            self.valid_refresh.pop(body.get('refresh_token'), None)
            return ApiResponse(200, {'message': 'Logged out successfully'})

        if request.path == '/always-401':
            return ApiResponse(401, {'error': 'forbidden for this token'})

        if request.path == '/boom':
            return ApiResponse(500, {'error': 'internal error'})

        email = self.valid_access.get(access_token)
        if email is None:
            return ApiResponse(401, {'error': 'Invalid or expired token'})

        if route == ('GET', '/auth/me'):
            return ApiResponse(200, dict(self.users[email]['profile']))
        if route == ('GET', '/movies'):
            return ApiResponse(200, [{'id': 7, 'title': 'Stalker'}])
        return ApiResponse(404, {'error': 'not found'})

    async def close(self):
        self.closed = True

    def _auth_body(self, email: str) -> dict:
        pair = self.issue(email)
        return {
            'user': dict(self.users[email]['profile']),
            'access_token': pair.access_token,
            'refresh_token': pair.refresh_token,
            'expires_in': 900,
        }


@pytest.fixture
def backend():
    """Fake auth backend with one registered user (a@b.com / secret123)."""
    return FakeBackend()


@pytest.fixture
def store():
    """Empty in-memory token store."""
    return MemoryTokenStore()


@pytest.fixture
def session(backend, store):
    """SessionManager wired to the fake backend."""
    return SessionManager(store, client=backend)


@pytest.fixture
def recorded(session):
    """Every snapshot published by the session, in order."""
    snapshots = []
    session.subscribe(snapshots.append)
    return snapshots


@pytest.fixture
def user_data():
    """Sample /auth/me payload."""
    return {
        'id': 42,
        'username': 'filmfan',
        'email': 'fan@example.com',
        'role': 'user',
        'avatar_url': None,
    }

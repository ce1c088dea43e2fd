import pytest
import requests

from netspark_sales import auth as auth_module
from netspark_sales.auth import AuthManager, FirebaseAuthError
from netspark_sales.mrc_performance.access_control import RoleResolver


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


class FakeFirebase:
    """Stands in for requests.post against the identity toolkit endpoints."""

    def __init__(self, sign_in=None, lookup=None):
        self.sign_in = sign_in or FakeResponse(200, {'idToken': 'token-1', 'localId': 'uid-1'})
        self.lookup = lookup or FakeResponse(200, {'users': [{'emailVerified': True}]})
        self.calls = []

    def __call__(self, url, params=None, json=None, timeout=None):
        self.calls.append((url, params, json))
        if url.endswith(':signInWithPassword'):
            return self.sign_in
        if url.endswith(':lookup'):
            return self.lookup
        raise AssertionError(f"unexpected url {url}")


@pytest.fixture
def manager():
    resolver = RoleResolver(
        executive_emails=['boss@netsparktelecom.com'],
        manager_emails=['lead@netsparktelecom.com'],
        allowed_domain='@netsparktelecom.com'
    )
    return AuthManager(resolver=resolver, api_key='test-key')


def test_authenticate_success(manager, monkeypatch):
    firebase = FakeFirebase()
    monkeypatch.setattr(auth_module.requests, 'post', firebase)

    success, info = manager.authenticate(' Boss@NetsparkTelecom.com ', 'secret')

    assert success is True
    assert info['email'] == 'boss@netsparktelecom.com'
    assert info['role'] == 'executive'
    assert info['seller_name'] == 'boss'
    assert info['id'] == 'uid-1'

    sign_in_url, params, body = firebase.calls[0]
    assert sign_in_url.endswith(':signInWithPassword')
    assert params == {'key': 'test-key'}
    assert body['email'] == 'boss@netsparktelecom.com'
    assert firebase.calls[1][2] == {'idToken': 'token-1'}


def test_authenticate_seller_by_domain(manager, monkeypatch):
    monkeypatch.setattr(auth_module.requests, 'post', FakeFirebase())

    success, info = manager.authenticate('jane.doe@netsparktelecom.com', 'secret')

    assert success is True
    assert info['role'] == 'seller'
    assert info['full_name'] == 'Jane Doe'


def test_authenticate_rejects_other_domains_without_calling_firebase(manager, monkeypatch):
    firebase = FakeFirebase()
    monkeypatch.setattr(auth_module.requests, 'post', firebase)

    success, result = manager.authenticate('jane@gmail.com', 'secret')

    assert success is False
    assert '@netsparktelecom.com' in result['error']
    assert firebase.calls == []


def test_authenticate_requires_credentials(manager):
    success, result = manager.authenticate('', '')
    assert success is False
    assert 'error' in result


def test_authenticate_bad_password(manager, monkeypatch):
    firebase = FakeFirebase(sign_in=FakeResponse(400, {'error': {'message': 'INVALID_LOGIN_CREDENTIALS'}}))
    monkeypatch.setattr(auth_module.requests, 'post', firebase)

    success, result = manager.authenticate('jane.doe@netsparktelecom.com', 'wrong')

    assert success is False
    assert result['error'] == "Invalid email or password"
    assert len(firebase.calls) == 1


def test_authenticate_unverified_email(manager, monkeypatch):
    firebase = FakeFirebase(lookup=FakeResponse(200, {'users': [{'emailVerified': False}]}))
    monkeypatch.setattr(auth_module.requests, 'post', firebase)

    success, result = manager.authenticate('jane.doe@netsparktelecom.com', 'secret')

    assert success is False
    assert result['unverified'] is True


def test_authenticate_network_error(manager, monkeypatch):
    def broken(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(auth_module.requests, 'post', broken)

    success, result = manager.authenticate('jane.doe@netsparktelecom.com', 'secret')

    assert success is False
    assert result['error'] == "Authentication failed. Please try again."


def test_authenticate_without_api_key(manager):
    manager.api_key = None
    success, result = manager.authenticate('jane.doe@netsparktelecom.com', 'secret')
    assert success is False
    assert 'not configured' in result['error']


def test_firebase_error_code_parsing():
    error = FirebaseAuthError("TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been disabled")
    assert error.code == "TOO_MANY_ATTEMPTS_TRY_LATER"
    assert "Too many" in error.user_message
    assert FirebaseAuthError("SOMETHING_NEW").user_message == "Authentication failed. Please try again."


def test_package_exports_only_live_helpers():
    import netspark_sales

    assert auth_module.__all__ == ['AuthManager', 'FirebaseAuthError']
    assert not hasattr(auth_module, 'require_login')
    assert not hasattr(netspark_sales, 'reset_firestore_client')
    for name in netspark_sales.__all__:
        assert hasattr(netspark_sales, name)

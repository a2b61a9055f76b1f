from datetime import timedelta

import pytest

from collabrixo.core.errors import NotAuthenticated, RemoteError
from collabrixo.core.security import create_access_token, session_from_token, verify_token
from collabrixo.services.account import AccountService
from collabrixo.services.appwrite import AppwriteClient
from collabrixo.services.auth_gate import AuthGate, AuthState

from conftest import TEST_EMAIL, TEST_PASSWORD

pytestmark = pytest.mark.anyio


@pytest.fixture
def gate(appwrite):
    return AuthGate(AccountService(appwrite.with_session(None)))


async def test_no_session_is_anonymous_without_remote_call(gate, fake):
    state = await gate.check()

    assert state is AuthState.ANONYMOUS
    assert fake.calls == []


async def test_unknown_session_is_anonymous(appwrite, fake):
    gate = AuthGate(AccountService(appwrite.with_session("expired")))

    assert await gate.check() is AuthState.ANONYMOUS
    assert fake.calls == [("GET", "/account")]


async def test_sign_in_authenticates(gate, user):
    signed_in = await gate.sign_in(TEST_EMAIL, TEST_PASSWORD)

    assert gate.state is AuthState.AUTHENTICATED
    assert signed_in.email == TEST_EMAIL
    assert gate.session_secret
    assert gate.require_user() is gate.user


async def test_sign_in_with_wrong_password_raises(gate, user):
    with pytest.raises(RemoteError) as exc_info:
        await gate.sign_in(TEST_EMAIL, "wrong-password")

    assert exc_info.value.status == 401
    assert gate.state is AuthState.CHECKING


async def test_sign_up_creates_account_then_signs_in(gate, fake):
    created = await gate.sign_up("grace@example.com", "hopper-1906", "Grace")

    assert created.name == "Grace"
    assert "grace@example.com" in fake.users
    assert gate.authenticated


async def test_sign_out_forgets_session(gate, fake, user):
    await gate.sign_in(TEST_EMAIL, TEST_PASSWORD)
    secret = gate.session_secret

    await gate.sign_out()

    assert gate.state is AuthState.ANONYMOUS
    assert secret not in fake.sessions
    with pytest.raises(NotAuthenticated):
        gate.require_user()


async def test_session_secret_falls_back_to_cookie_without_server_key(test_settings, http, user, fake):
    client = AppwriteClient(http=http, endpoint=test_settings.APPWRITE_ENDPOINT, project_id="proj")

    session = await AccountService(client).create_session(TEST_EMAIL, TEST_PASSWORD)

    assert session.secret in fake.sessions


@pytest.mark.parametrize(
    "state, path, expected",
    [
        (AuthState.ANONYMOUS, "/", "/auth"),
        (AuthState.ANONYMOUS, "/meetings", "/auth"),
        (AuthState.ANONYMOUS, "/auth", None),
        (AuthState.AUTHENTICATED, "/auth", "/"),
        (AuthState.AUTHENTICATED, "/journey", None),
        (AuthState.CHECKING, "/", None),
    ],
)
def test_redirect_for(gate, state, path, expected):
    gate.state = state

    assert gate.redirect_for(path) == expected


def test_token_round_trips_session_secret(test_settings):
    token = create_access_token(test_settings, "user1", "secret-abc")

    assert verify_token(test_settings, token)["sub"] == "user1"
    assert session_from_token(test_settings, token) == "secret-abc"


def test_session_secret_is_not_readable_in_the_token(test_settings):
    token = create_access_token(test_settings, "user1", "secret-abc")

    assert "secret-abc" not in str(verify_token(test_settings, token))


def test_expired_or_forged_token_has_no_session(test_settings):
    expired = create_access_token(test_settings, "user1", "secret-abc", expires_delta=timedelta(minutes=-1))

    assert session_from_token(test_settings, expired) is None
    assert session_from_token(test_settings, "not-a-jwt") is None
    assert session_from_token(test_settings, None) is None
    with pytest.raises(NotAuthenticated):
        verify_token(test_settings, "not-a-jwt")

import pytest

from services.auth import Anonymous, Authenticated, SecretsIdentityProvider, hash_secret
from services.errors import AuthError


@pytest.fixture
def provider():
    return SecretsIdentityProvider({"Admin@Example.org": hash_secret("hare-krishna")})


def test_hash_secret_is_sha256_hex():
    assert hash_secret("") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_starts_anonymous(provider):
    assert provider.session == Anonymous()
    assert provider.session.is_admin is False


def test_authenticate_success(provider):
    session = provider.authenticate("admin@example.org ", "hare-krishna")
    assert isinstance(session, Authenticated)
    assert session.is_admin is True
    assert session.identifier == "admin@example.org"
    assert provider.session == session


def test_wrong_password_and_unknown_account_look_the_same(provider):
    with pytest.raises(AuthError) as wrong_password:
        provider.authenticate("admin@example.org", "nope")
    with pytest.raises(AuthError) as unknown_account:
        provider.authenticate("someone@example.org", "hare-krishna")

    assert str(wrong_password.value) == str(unknown_account.value) == "Invalid credentials. Please try again."
    assert provider.session == Anonymous()


def test_listeners_see_login_and_logout(provider):
    seen = []
    provider.subscribe_to_session_changes(seen.append)

    provider.authenticate("admin@example.org", "hare-krishna")
    provider.end_session()

    assert isinstance(seen[0], Anonymous)
    assert isinstance(seen[1], Authenticated)
    assert isinstance(seen[2], Anonymous)


def test_unsubscribe_stops_notifications(provider):
    seen = []
    unsubscribe = provider.subscribe_to_session_changes(seen.append)
    unsubscribe()

    provider.authenticate("admin@example.org", "hare-krishna")
    assert len(seen) == 1

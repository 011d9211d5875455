import pytest

from core.security import (
    CredentialManager,
    CredentialsAdapter,
    ManagedCredentials,
    StaticCredentials,
)
from exceptions import CredentialsError, InvalidConfiguration
from tests.mocks import CountingCredentials, FakeRequest, make_response


def test_initialize_stamps_header_and_installs_itself():
    adapter = CredentialsAdapter(StaticCredentials("abc"))
    request = FakeRequest()
    adapter.initialize(request)
    assert request.headers["Authorization"] == "Bearer abc"
    assert request.unsuccessful_response_handler is adapter


def test_refreshes_on_401():
    credentials = CountingCredentials()
    adapter = CredentialsAdapter(credentials)
    request = FakeRequest()
    adapter.initialize(request)

    assert adapter.handle_response(request, make_response(401), True) is True
    assert credentials.refreshes == 1
    assert request.headers["Authorization"] == "Bearer token-1"


@pytest.mark.parametrize("status", [403, 404, 500, 503])
def test_ignores_other_statuses(status):
    credentials = CountingCredentials()
    adapter = CredentialsAdapter(credentials)
    assert adapter.handle_response(FakeRequest(), make_response(status), True) is False
    assert credentials.refreshes == 0


def test_refreshes_on_invalid_token_challenge():
    credentials = CountingCredentials()
    adapter = CredentialsAdapter(credentials)
    response = make_response(
        403, {"WWW-Authenticate": 'Bearer realm="example", error="invalid_token"'}
    )
    assert adapter.handle_response(FakeRequest(), response, True) is True
    assert credentials.refreshes == 1


def test_other_bearer_challenge_not_refreshed():
    credentials = CountingCredentials()
    adapter = CredentialsAdapter(credentials)
    response = make_response(
        401, {"WWW-Authenticate": 'Bearer realm="example", error="insufficient_scope"'}
    )
    assert adapter.handle_response(FakeRequest(), response, True) is False
    assert credentials.refreshes == 0


def test_non_bearer_challenge_falls_back_to_status():
    adapter = CredentialsAdapter(CountingCredentials())
    response = make_response(401, {"WWW-Authenticate": 'Basic realm="example"'})
    assert adapter.handle_response(FakeRequest(), response, True) is True


def test_failed_refresh_declines_retry():
    adapter = CredentialsAdapter(CountingCredentials(fail_refresh=True))
    assert adapter.handle_response(FakeRequest(), make_response(401), True) is False


def test_adapter_requires_credentials():
    with pytest.raises(InvalidConfiguration):
        CredentialsAdapter(None)


def test_static_credentials_reject_empty_token():
    with pytest.raises(InvalidConfiguration):
        StaticCredentials("")


def test_managed_credentials_refresh_reads_new_value(monkeypatch):
    monkeypatch.setenv("SDK_TOKEN", "first")
    credentials = ManagedCredentials(CredentialManager(), "SDK_TOKEN")
    assert credentials.get_access_token() == "first"

    monkeypatch.setenv("SDK_TOKEN", "second")
    assert credentials.get_access_token() == "first"
    credentials.refresh()
    assert credentials.get_access_token() == "second"


def test_managed_credentials_missing_token(monkeypatch):
    monkeypatch.delenv("SDK_TOKEN", raising=False)
    credentials = ManagedCredentials(CredentialManager(), "SDK_TOKEN")
    with pytest.raises(CredentialsError):
        credentials.get_access_token()

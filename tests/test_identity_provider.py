import httpx
import pytest

from boost_portal.config import settings
from boost_portal.errors import IdentityProviderConfigError, IdentityProviderError
from boost_portal.services import identity_provider
from boost_portal.services.identity_provider import ClerkAdminClient, IdentityUser


class _Recorder:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, method, url, *, params=None, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json, "headers": headers})
        status_code, body = self.responses.pop(0)
        return httpx.Response(status_code, json=body, request=httpx.Request(method, url))


CLERK_USER = {
    "id": "user_abc",
    "primary_email_address_id": "idn_2",
    "email_addresses": [
        {"id": "idn_1", "email_address": "old@acme.test"},
        {"id": "idn_2", "email_address": "jane@acme.test"},
    ],
}


def _client():
    return ClerkAdminClient(secret_key="sk_test_123", base_url="https://clerk.api.test/v1/")


def test_find_user_by_email(monkeypatch):
    recorder = _Recorder((200, [CLERK_USER]), (200, []))
    monkeypatch.setattr(identity_provider.httpx, "request", recorder)
    client = _client()

    found = client.find_user_by_email("jane@acme.test")
    missing = client.find_user_by_email("nobody@acme.test")

    assert found == IdentityUser(id="user_abc", email="jane@acme.test")
    assert missing is None
    assert recorder.calls[0]["url"] == "https://clerk.api.test/v1/users"
    assert recorder.calls[0]["params"] == {"email_address": "jane@acme.test", "limit": 1}
    assert recorder.calls[0]["headers"] == {"Authorization": "Bearer sk_test_123"}


def test_create_user_splits_name(monkeypatch):
    recorder = _Recorder((200, {"id": "user_new", "email_addresses": []}))
    monkeypatch.setattr(identity_provider.httpx, "request", recorder)

    created = _client().create_user(email="new@acme.test", name="Jane van Dyke")

    assert created == IdentityUser(id="user_new", email="new@acme.test")
    body = recorder.calls[0]["json"]
    assert body["email_address"] == ["new@acme.test"]
    assert body["first_name"] == "Jane"
    assert body["last_name"] == "van Dyke"


def test_send_invitation(monkeypatch):
    recorder = _Recorder((200, {"id": "inv_1", "status": "pending"}))
    monkeypatch.setattr(identity_provider.httpx, "request", recorder)

    result = _client().send_invitation(
        email="new@acme.test", redirect_url="https://portal.boost.test/sign-up", metadata={"company": "Acme"}
    )

    assert result["id"] == "inv_1"
    assert recorder.calls[0]["url"] == "https://clerk.api.test/v1/invitations"
    assert recorder.calls[0]["json"]["public_metadata"] == {"company": "Acme"}


def test_rejected_secret_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(identity_provider.httpx, "request", _Recorder((401, {"errors": []})))

    with pytest.raises(IdentityProviderConfigError) as excinfo:
        _client().find_user_by_email("jane@acme.test")

    assert excinfo.value.setting == "CLERK_SECRET_KEY"


def test_upstream_failure_is_reported(monkeypatch):
    monkeypatch.setattr(
        identity_provider.httpx, "request", _Recorder((422, {"errors": [{"code": "form_identifier_exists"}]}))
    )

    with pytest.raises(IdentityProviderError) as excinfo:
        _client().create_user(email="jane@acme.test", name="Jane")

    assert excinfo.value.status_code == 422
    assert excinfo.value.error_payload == {"errors": [{"code": "form_identifier_exists"}]}


def test_network_failure_is_reported(monkeypatch):
    def _boom(method, url, **kwargs):
        raise httpx.ConnectError("connection refused", request=httpx.Request(method, url))

    monkeypatch.setattr(identity_provider.httpx, "request", _boom)

    with pytest.raises(IdentityProviderError) as excinfo:
        _client().find_user_by_email("jane@acme.test")

    assert excinfo.value.status_code is None


def test_from_settings_requires_secret(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", None)

    with pytest.raises(IdentityProviderConfigError) as excinfo:
        ClerkAdminClient.from_settings()

    assert excinfo.value.setting == "CLERK_SECRET_KEY"


def test_from_settings_uses_configured_base_url(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", "sk_live_1")
    monkeypatch.setattr(settings, "CLERK_API_BASE_URL", "https://clerk.api.test/v1")

    client = ClerkAdminClient.from_settings()

    assert client.secret_key == "sk_live_1"
    assert client.base_url == "https://clerk.api.test/v1"

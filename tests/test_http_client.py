import base64

import httpx
import pytest

from sample_agents import echo_handler
from service_agents.config import ServiceSettings
from service_agents.errors import ConfigurationError
from service_agents.http_client import create_client, initialize_headers


class SequenceTokenHelper:
    def __init__(self, tokens: list) -> None:
        self.tokens = list(tokens)
        self.calls = 0

    def get_token(self, settings: ServiceSettings) -> str:
        token = self.tokens[self.calls]
        self.calls += 1
        return token


def test_sets_base_address_and_accept_header():
    client = httpx.Client()
    initialize_headers(client, ServiceSettings(url="https://orders.example/api", headers={"X-Tenant": "acme"}))

    assert client.base_url == httpx.URL("https://orders.example/api/")
    assert client.headers["Accept"] == "application/json"
    assert client.headers["X-Tenant"] == "acme"


def test_initialize_twice_is_idempotent():
    settings = ServiceSettings(
        url="https://orders.example/api",
        auth_scheme="api_key",
        api_key="k-123",
        headers={"X-Tenant": "acme"},
    )
    once = httpx.Client()
    twice = httpx.Client()

    initialize_headers(once, settings)
    initialize_headers(twice, settings)
    initialize_headers(twice, settings)

    assert twice.base_url == once.base_url
    assert twice.headers.multi_items() == once.headers.multi_items()
    assert twice.headers.get_list("ApiKey") == ["k-123"]


def test_api_key_uses_configured_header_name():
    client = httpx.Client()
    initialize_headers(
        client,
        ServiceSettings(url="https://x.example", auth_scheme="api_key", api_key="k", api_key_header_name="X-Api-Key"),
    )
    assert client.headers["X-Api-Key"] == "k"


def test_basic_auth_with_domain():
    client = httpx.Client()
    initialize_headers(
        client,
        ServiceSettings(
            url="https://x.example",
            auth_scheme="basic",
            basic_auth_user_name="alice",
            basic_auth_password="secret",
            basic_auth_domain="CORP",
        ),
    )
    expected = base64.b64encode(b"CORP\\alice:secret").decode("ascii")
    assert client.headers["Authorization"] == f"Basic {expected}"


def test_bearer_uses_static_token():
    client = httpx.Client()
    initialize_headers(client, ServiceSettings(url="https://x.example", auth_scheme="bearer", bearer_token="abc"))
    assert client.headers["Authorization"] == "Bearer abc"


def test_oauth_asks_token_helper_on_every_request():
    helper = SequenceTokenHelper(["tok-1", "tok-2"])
    client = httpx.Client(transport=httpx.MockTransport(echo_handler))
    settings = ServiceSettings(
        url="https://x.example",
        auth_scheme="oauth_client_credentials",
        oauth_client_id="c",
        oauth_client_secret="s",
    )

    initialize_headers(client, settings, helper)
    first = client.get("orders").json()
    second = client.get("orders").json()

    assert first["authorization"] == "Bearer tok-1"
    assert second["authorization"] == "Bearer tok-2"
    assert helper.calls == 2
    assert "Authorization" not in client.headers


def test_oauth_without_token_helper_fails():
    settings = ServiceSettings(
        url="https://x.example",
        auth_scheme="oauth_client_credentials",
        oauth_client_id="c",
        oauth_client_secret="s",
    )
    with pytest.raises(ConfigurationError, match="token helper"):
        initialize_headers(httpx.Client(), settings)


def test_create_client_honors_timeout():
    client = create_client(ServiceSettings(url="https://x.example", timeout_s=5))
    try:
        assert client.timeout == httpx.Timeout(5)
    finally:
        client.close()

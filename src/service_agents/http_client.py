from __future__ import annotations
import base64
import logging
from typing import Generator, Optional, Protocol, Union

import httpx

from .config import AuthScheme, ServiceSettings
from .errors import ConfigurationError

log = logging.getLogger("service_agents.http")

AnyClient = Union[httpx.Client, httpx.AsyncClient]


class TokenHelper(Protocol):
    """Supplies access tokens for the oauth_client_credentials scheme."""

    def get_token(self, settings: ServiceSettings) -> str:
        ...


def _mask_token(tok: Optional[str]) -> str:
    if not tok:
        return "-"
    t = tok.strip()
    if len(t) <= 8:
        return "***"
    return f"{t[:4]}…{t[-4:]}"


def _basic_credentials(settings: ServiceSettings) -> str:
    user = settings.basic_auth_user_name or ""
    if settings.basic_auth_domain:
        user = f"{settings.basic_auth_domain}\\{user}"
    raw = f"{user}:{settings.basic_auth_password or ''}".encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def auth_headers(settings: ServiceSettings) -> dict[str, str]:
    """Static headers required by the configured auth scheme."""
    scheme = settings.auth_scheme
    if scheme == AuthScheme.BEARER:
        if not settings.bearer_token:
            return {}
        return {"Authorization": f"Bearer {settings.bearer_token}"}
    if scheme == AuthScheme.API_KEY:
        if not settings.api_key:
            raise ConfigurationError("api_key is required for auth scheme api_key")
        return {settings.api_key_header_name: settings.api_key}
    if scheme == AuthScheme.BASIC:
        return {"Authorization": f"Basic {_basic_credentials(settings)}"}
    return {}


class TokenAuth(httpx.Auth):
    """Bearer auth that asks the token helper for a token on every request."""

    def __init__(self, token_helper: TokenHelper, settings: ServiceSettings) -> None:
        self.token_helper = token_helper
        self.settings = settings

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self.token_helper.get_token(self.settings)}"
        yield request


def initialize_headers(
    client: AnyClient,
    settings: ServiceSettings,
    token_helper: Optional[TokenHelper] = None,
) -> None:
    """Set base address and default headers on ``client``.

    Values are assigned, not appended, so repeated calls are idempotent.
    """
    client.base_url = settings.base_url()
    client.headers["Accept"] = "application/json"
    for key, value in settings.headers.items():
        client.headers[key] = value
    for key, value in auth_headers(settings).items():
        client.headers[key] = value
    if settings.auth_scheme == AuthScheme.OAUTH_CLIENT_CREDENTIALS:
        if token_helper is None:
            raise ConfigurationError("auth scheme oauth_client_credentials requires a token helper")
        client.auth = TokenAuth(token_helper, settings)
    log.debug(
        "Headers initialized | base_url=%s | auth=%s | token=%s",
        client.base_url,
        settings.auth_scheme.value,
        _mask_token(client.headers.get("Authorization")),
    )


def create_client(settings: ServiceSettings) -> httpx.Client:
    """Build a bare httpx client honoring the transport settings."""
    return httpx.Client(
        timeout=settings.timeout_s,
        follow_redirects=True,
        verify=settings.verify_tls,
    )

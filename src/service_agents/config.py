from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel, to_pascal

from .errors import ConfigurationError


def _aliases(name: str) -> AliasChoices:
    # Accept snake_case plus the camel/Pascal keys older config files use.
    pascal = to_pascal(name)
    choices = [name, to_camel(name), pascal]
    if pascal.startswith("Oauth"):
        choices.append("OAuth" + pascal[len("Oauth"):])
    return AliasChoices(*choices)


def _normalize(value: str) -> str:
    return value.replace("_", "").replace("-", "").replace(" ", "").lower()


class AuthScheme(str, Enum):
    NONE = "none"
    BEARER = "bearer"
    OAUTH_CLIENT_CREDENTIALS = "oauth_client_credentials"
    API_KEY = "api_key"
    BASIC = "basic"

    @classmethod
    def _missing_(cls, value: object) -> Optional["AuthScheme"]:
        if not isinstance(value, str):
            return None
        wanted = _normalize(value)
        for member in cls:
            if _normalize(member.value) == wanted:
                return member
        return None


class ServiceSettings(BaseModel):
    """Connection parameters for one remote service."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=_aliases),
        validate_assignment=True,
        extra="forbid",
    )

    url: Optional[str] = None
    scheme: str = "https"
    host: Optional[str] = None
    port: Optional[int] = Field(default=None, ge=1, le=65535)
    path: Optional[str] = None

    auth_scheme: AuthScheme = AuthScheme.NONE
    bearer_token: Optional[str] = None
    api_key: Optional[str] = None
    api_key_header_name: str = "ApiKey"
    basic_auth_user_name: Optional[str] = None
    basic_auth_password: Optional[str] = None
    basic_auth_domain: Optional[str] = None
    oauth_client_id: Optional[str] = None
    oauth_client_secret: Optional[str] = None
    oauth_scope: Optional[str] = None
    oauth_path_addition: Optional[str] = None

    headers: Dict[str, str] = Field(default_factory=dict)
    timeout_s: float = Field(default=30.0, gt=0)
    verify_tls: bool = True

    @field_validator("auth_scheme", mode="before")
    @classmethod
    def _parse_auth_scheme(cls, value: object) -> object:
        if value is None:
            return AuthScheme.NONE
        if isinstance(value, str):
            try:
                return AuthScheme(value)
            except ValueError:
                return value
        return value

    def base_url(self) -> str:
        """Return the absolute base URL, composing it from host parts when needed."""
        if self.url:
            candidate = self.url.strip()
        elif self.host:
            netloc = self.host.strip("/")
            if self.port:
                netloc = f"{netloc}:{self.port}"
            path = (self.path or "").strip("/")
            candidate = f"{self.scheme}://{netloc}/{path}/" if path else f"{self.scheme}://{netloc}/"
        else:
            raise ConfigurationError("url (or host) is required")

        parsed = urlparse(candidate)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(f"url is not an absolute http(s) URI: {candidate!r}")
        return candidate

    def validate_for_registration(self) -> None:
        self.base_url()
        scheme = self.auth_scheme
        if scheme == AuthScheme.API_KEY and not self.api_key:
            raise ConfigurationError("api_key is required for auth scheme api_key")
        if scheme == AuthScheme.BASIC and not (self.basic_auth_user_name and self.basic_auth_password):
            raise ConfigurationError("basic_auth_user_name and basic_auth_password are required for auth scheme basic")
        if scheme == AuthScheme.OAUTH_CLIENT_CREDENTIALS and not (self.oauth_client_id and self.oauth_client_secret):
            raise ConfigurationError(
                "oauth_client_id and oauth_client_secret are required for auth scheme oauth_client_credentials"
            )


class ServiceAgentSettings:
    """Logical service name -> ServiceSettings."""

    def __init__(self, services: Optional[Mapping[str, ServiceSettings]] = None) -> None:
        self._services: Dict[str, ServiceSettings] = dict(services or {})

    @property
    def services(self) -> Mapping[str, ServiceSettings]:
        return MappingProxyType(self._services)

    def add(self, name: str, settings: ServiceSettings) -> None:
        """Add or replace the settings for ``name`` (last writer wins)."""
        if not name:
            raise ConfigurationError("service name must not be empty")
        self._services[name] = settings

    def get_service_settings(self, name: str) -> ServiceSettings:
        try:
            return self._services[name]
        except KeyError:
            raise ConfigurationError(f"No settings configured for service '{name}'") from None

    def merge(self, other: "ServiceAgentSettings") -> None:
        for name, settings in other.items():
            self.add(name, settings)

    def snapshot(self) -> Mapping[str, ServiceSettings]:
        return MappingProxyType({name: s.model_copy(deep=True) for name, s in self._services.items()})

    def names(self) -> list[str]:
        return list(self._services)

    def items(self):
        return self._services.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, name: object) -> bool:
        return name in self._services


@dataclass
class ServiceSettingsJsonFile:
    """Pointer to a JSON settings file."""

    file_name: str = "serviceagentconfig.json"
    section: str = "ServiceAgents"

from __future__ import annotations
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Hashable, Mapping, Optional

import httpx

from .config import ServiceSettings
from .errors import AgentNotFoundError, ConfigurationError
from .http_client import TokenHelper, create_client

log = logging.getLogger("service_agents.container")

ClientConfigurator = Callable[["AgentContainer", httpx.Client], None]
Factory = Callable[["AgentContainer"], Any]


class Lifetime(str, Enum):
    TRANSIENT = "transient"
    SINGLETON = "singleton"


@dataclass
class Registration:
    key: Hashable
    factory: Factory
    lifetime: Lifetime = Lifetime.TRANSIENT


def _key_name(key: Hashable) -> str:
    return key.__name__ if isinstance(key, type) else str(key)


class AgentContainer:
    """Registration table for named HTTP clients and injectable services."""

    def __init__(self, client_factory: Callable[[ServiceSettings], httpx.Client] | None = None) -> None:
        self._client_factory = client_factory or create_client
        self._registrations: Dict[Hashable, Registration] = {}
        self._singletons: Dict[Hashable, Any] = {}
        self._client_configs: Dict[str, tuple[ServiceSettings, ClientConfigurator]] = {}
        self._clients: Dict[str, httpx.Client] = {}
        self._settings: Mapping[str, ServiceSettings] = MappingProxyType({})
        self._token_helper: Optional[TokenHelper] = None
        self._lock = threading.RLock()

    # ---------- settings ----------
    def configure_settings(self, snapshot: Mapping[str, ServiceSettings]) -> None:
        merged = dict(self._settings)
        merged.update(snapshot)
        self._settings = MappingProxyType(merged)

    @property
    def settings(self) -> Mapping[str, ServiceSettings]:
        return self._settings

    def add_token_helper(self, helper: TokenHelper) -> None:
        self._token_helper = helper

    @property
    def token_helper(self) -> Optional[TokenHelper]:
        return self._token_helper

    # ---------- http clients ----------
    def add_http_client(self, name: str, settings: ServiceSettings, configure: ClientConfigurator) -> None:
        with self._lock:
            if name in self._client_configs:
                log.warning("Replacing HTTP client registration for '%s'", name)
            self._client_configs[name] = (settings, configure)
            stale = self._clients.pop(name, None)
        if stale is not None:
            stale.close()

    def has_http_client(self, name: str) -> bool:
        return name in self._client_configs

    def get_http_client(self, name: str) -> httpx.Client:
        """Return the named client, building it on first use."""
        client = self._clients.get(name)
        if client is not None:
            return client
        with self._lock:
            client = self._clients.get(name)
            if client is not None:
                return client
            try:
                settings, configure = self._client_configs[name]
            except KeyError:
                raise AgentNotFoundError(name, f"No HTTP client registered for '{name}'") from None
            client = self._client_factory(settings)
            try:
                configure(self, client)
            except Exception:
                client.close()
                raise
            self._clients[name] = client
            log.info("HTTP client created | name=%s | base_url=%s", name, client.base_url)
            return client

    # ---------- services ----------
    def _add(self, registration: Registration) -> None:
        if registration.key in self._registrations:
            log.warning("Replacing registration for '%s'", _key_name(registration.key))
            self._singletons.pop(registration.key, None)
        self._registrations[registration.key] = registration

    def add_transient(self, key: Hashable, factory: Factory) -> None:
        self._add(Registration(key=key, factory=factory, lifetime=Lifetime.TRANSIENT))

    def add_singleton(self, key: Hashable, factory: Factory) -> None:
        self._add(Registration(key=key, factory=factory, lifetime=Lifetime.SINGLETON))

    def add_alias(self, key: Hashable, target: Hashable) -> None:
        """Make ``key`` resolve through the registration of ``target``."""
        if target not in self._registrations:
            raise ConfigurationError(f"Cannot alias '{_key_name(key)}': '{_key_name(target)}' is not registered")
        self._add(Registration(key=key, factory=lambda c: c.resolve(target), lifetime=Lifetime.TRANSIENT))

    def resolve(self, key: Hashable) -> Any:
        try:
            registration = self._registrations[key]
        except KeyError:
            raise AgentNotFoundError(_key_name(key), f"Nothing registered for '{_key_name(key)}'") from None
        if registration.lifetime == Lifetime.TRANSIENT:
            return registration.factory(self)
        with self._lock:
            if key not in self._singletons:
                self._singletons[key] = registration.factory(self)
            return self._singletons[key]

    def keys(self) -> list[Hashable]:
        return list(self._registrations)

    def __contains__(self, key: object) -> bool:
        return key in self._registrations

    # ---------- lifecycle ----------
    def close(self) -> None:
        with self._lock:
            clients, self._clients = self._clients, {}
        for name, client in clients.items():
            client.close()
            log.debug("HTTP client closed | name=%s", name)

    def __enter__(self) -> "AgentContainer":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

"""
Service agent registration.

Reads per-service settings and wires every configured service into an
``AgentContainer``:

- a named ``httpx.Client`` whose base address and headers come from the
  service settings (built lazily on first use)
- the service name, resolved as a transient agent that receives that client
- the agent type and optional interface as aliases of the service name,
  when the type serves exactly one service

Usage:
    container = AgentContainer()
    register_all_agents(
        container,
        lambda f: setattr(f, "file_name", "serviceagents.json"),
        agents={"OrderAgent": OrderAgent},
    )
    orders = container.resolve(OrderAgent)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Callable, Mapping, Optional, Union

import httpx

from .config import AuthScheme, ServiceAgentSettings, ServiceSettings, ServiceSettingsJsonFile
from .container import AgentContainer
from .errors import AgentNotFoundError, AmbiguousAgentError, ConfigurationError, InvalidArgumentError
from .http_client import TokenHelper, initialize_headers
from .loader import load_settings
from .resolver import candidate_types, resolve

log = logging.getLogger("service_agents.registration")

ClientCreatedHook = Callable[[AgentContainer, httpx.Client], None]
AgentFactory = Callable[[httpx.Client], Any]


@dataclass(frozen=True)
class AgentRegistration:
    """Agent constructor for one service, optionally exposed under an interface."""

    agent_type: AgentFactory
    interface: Optional[type] = None


AgentSpec = Union[AgentFactory, AgentRegistration]


def _as_registration(spec: AgentSpec) -> AgentRegistration:
    return spec if isinstance(spec, AgentRegistration) else AgentRegistration(agent_type=spec)


def _type_name(t: Any) -> str:
    return getattr(t, "__name__", repr(t))


def _register_agent(
    container: AgentContainer,
    name: str,
    registration: AgentRegistration,
    shared: bool,
    on_client_created: Optional[ClientCreatedHook],
) -> None:
    service_settings = container.settings[name]

    def configure(c: AgentContainer, client: httpx.Client) -> None:
        initialize_headers(client, service_settings, c.token_helper)
        if on_client_created is not None:
            on_client_created(c, client)

    container.add_http_client(name, service_settings, configure)

    agent_type = registration.agent_type

    def build(c: AgentContainer) -> Any:
        return agent_type(c.get_http_client(name))

    container.add_transient(name, build)
    # A type serving several services is only reachable by service name.
    if not shared:
        container.add_alias(agent_type, name)
        if registration.interface is not None:
            container.add_alias(registration.interface, name)

    log.info(
        "Service agent registered | name=%s | agent=%s | interface=%s",
        name,
        _type_name(agent_type),
        _type_name(registration.interface) if registration.interface else "-",
    )


def _shared_types(registrations: Mapping[str, AgentRegistration]) -> set:
    names_by_type: dict[Any, list[str]] = {}
    for name, registration in registrations.items():
        names_by_type.setdefault(registration.agent_type, []).append(name)

    shared = set()
    for agent_type, names in names_by_type.items():
        if len(names) < 2:
            continue
        shared.add(agent_type)
        with_interface = [n for n in names if registrations[n].interface is not None]
        if with_interface:
            raise AmbiguousAgentError(_type_name(registrations[with_interface[0]].interface), names)
    return shared


def register(
    container: AgentContainer,
    settings: ServiceAgentSettings,
    agents: Mapping[str, AgentSpec],
    on_client_created: Optional[ClientCreatedHook] = None,
    token_helper: Optional[TokenHelper] = None,
) -> AgentContainer:
    """Register a client and an agent for every configured service.

    Every configured name must have an entry in ``agents``; a missing one
    fails before anything is added to the container. The agent type (and its
    interface) is registered as a key only when it serves a single service.
    """
    missing = [name for name in settings if name not in agents]
    if missing:
        raise AgentNotFoundError(missing[0], f"No service agent registered for: {', '.join(missing)}")

    for name, service_settings in settings.items():
        try:
            service_settings.validate_for_registration()
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid settings for service '{name}': {e}") from e

    helper = token_helper or container.token_helper
    needs_token = [
        name for name, s in settings.items() if s.auth_scheme == AuthScheme.OAUTH_CLIENT_CREDENTIALS
    ]
    if needs_token and helper is None:
        raise ConfigurationError(
            f"auth scheme oauth_client_credentials requires a token helper: {', '.join(needs_token)}"
        )

    registrations = {name: _as_registration(agents[name]) for name in settings}
    shared = _shared_types(registrations)

    if token_helper is not None:
        container.add_token_helper(token_helper)
    container.configure_settings(settings.snapshot())
    for name, registration in registrations.items():
        _register_agent(container, name, registration, registration.agent_type in shared, on_client_created)
    return container


def register_single_agent(
    container: AgentContainer,
    agent_type: type,
    settings_setup: Optional[Callable[[ServiceSettings], None]],
    on_client_created: Optional[ClientCreatedHook] = None,
    interface: Optional[type] = None,
    token_helper: Optional[TokenHelper] = None,
) -> AgentContainer:
    """Register one agent, keyed by its class name, from programmatic settings."""
    if settings_setup is None:
        raise InvalidArgumentError("settings_setup")

    service_settings = ServiceSettings()
    settings_setup(service_settings)

    settings = ServiceAgentSettings()
    settings.add(agent_type.__name__, service_settings)
    return register(
        container,
        settings,
        {agent_type.__name__: AgentRegistration(agent_type=agent_type, interface=interface)},
        on_client_created,
        token_helper,
    )


def resolve_agents(settings: ServiceAgentSettings, module: Union[str, ModuleType]) -> dict[str, AgentSpec]:
    """Map each configured name to the agent class in ``module`` named after it."""
    candidates = candidate_types(module)
    return {name: resolve(candidates, name) for name in settings}


def register_all_agents(
    container: AgentContainer,
    json_file_setup: Optional[Callable[[ServiceSettingsJsonFile], None]],
    settings_setup: Optional[Callable[[ServiceAgentSettings], None]] = None,
    on_client_created: Optional[ClientCreatedHook] = None,
    agents: Optional[Mapping[str, AgentSpec]] = None,
    module: Union[str, ModuleType, None] = None,
    token_helper: Optional[TokenHelper] = None,
) -> AgentContainer:
    """Load settings from a JSON file and register every configured agent.

    ``settings_setup`` runs after the file is read; entries it adds replace file
    entries with the same name. Without ``agents``, agent classes are looked up
    in ``module`` (default ``__main__``) by name prefix.
    """
    if json_file_setup is None:
        raise InvalidArgumentError("json_file_setup")

    settings = load_settings(json_file_setup=json_file_setup, settings_setup=settings_setup)
    if agents is None:
        agents = resolve_agents(settings, module if module is not None else "__main__")
    return register(container, settings, agents, on_client_created, token_helper)

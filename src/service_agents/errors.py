from __future__ import annotations


class ServiceAgentError(Exception):
    """Base class for service agent registration failures."""


class ConfigurationError(ServiceAgentError):
    """Settings source is missing, malformed or incomplete."""


class AgentNotFoundError(ServiceAgentError, LookupError):
    """A configured service has no agent implementation."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"No service agent found for '{name}'")


class AmbiguousAgentError(ServiceAgentError):
    """More than one agent implementation matches a service name."""

    def __init__(self, name: str, candidates: list[str]) -> None:
        self.name = name
        self.candidates = candidates
        super().__init__(
            f"Multiple service agents match '{name}': {', '.join(sorted(candidates))}"
        )


class InvalidArgumentError(ServiceAgentError, ValueError):
    """A required setup callback was omitted."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"{argument} cannot be None.")

from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Hashable

from fastapi import FastAPI, HTTPException, Request, status

from .container import AgentContainer
from .errors import AgentNotFoundError

log = logging.getLogger("service_agents.fastapi")

STATE_KEY = "service_agents"


def container_lifespan(container: AgentContainer):
    """Lifespan that exposes ``container`` on app state and closes its clients on shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setattr(app.state, STATE_KEY, container)
        log.info("Service agents available: %s", ", ".join(sorted(container.settings)) or "-")
        try:
            yield
        finally:
            container.close()
            log.info("Service agent clients closed")

    return lifespan


def get_container(request: Request) -> AgentContainer:
    container = getattr(request.app.state, STATE_KEY, None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Service agents are not configured",
        )
    return container


def agent_dependency(key: Hashable) -> Callable[[Request], Any]:
    """Dependency resolving ``key`` (agent type, interface or service name) per request."""

    def dependency(request: Request) -> Any:
        container = get_container(request)
        try:
            return container.resolve(key)
        except AgentNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=str(exc),
            ) from exc

    return dependency

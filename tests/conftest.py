"""Pytest configuration and fixtures."""

from typing import Callable, List

import httpx
import pytest

from sample_agents import echo_handler
from service_agents.config import ServiceSettings
from service_agents.container import AgentContainer


@pytest.fixture
def created_clients() -> List[httpx.Client]:
    return []


@pytest.fixture
def mock_client_factory(created_clients) -> Callable[[ServiceSettings], httpx.Client]:
    """Client factory whose clients answer every request through echo_handler."""

    def factory(settings: ServiceSettings) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(echo_handler), timeout=settings.timeout_s)
        created_clients.append(client)
        return client

    return factory


@pytest.fixture
def container(mock_client_factory):
    c = AgentContainer(client_factory=mock_client_factory)
    yield c
    c.close()

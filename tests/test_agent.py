import json

import httpx
import pytest

from sample_agents import CustomerAgent, OrderAgent, echo_handler


def recording_client(seen: list) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json={})

    return httpx.Client(base_url="https://orders.example/api/", transport=httpx.MockTransport(handler))


def test_name_is_class_name():
    assert OrderAgent.name() == "OrderAgent"
    assert CustomerAgent.name() == "CustomerAgent"


def test_put_json_sends_body_to_relative_path():
    seen = []
    agent = OrderAgent(recording_client(seen))

    resp = agent.put_json("orders/7", {"status": "shipped"})

    assert resp.status_code == 200
    assert seen[0].method == "PUT"
    assert str(seen[0].url) == "https://orders.example/api/orders/7"
    assert json.loads(seen[0].content) == {"status": "shipped"}


def test_post_json_sends_body():
    seen = []
    agent = OrderAgent(recording_client(seen))

    agent.post_json("orders", {"sku": "A-1"})

    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"sku": "A-1"}


def test_delete_returns_response():
    seen = []
    agent = OrderAgent(recording_client(seen))

    resp = agent.delete("orders/7")

    assert resp.status_code == 204
    assert seen[0].method == "DELETE"
    assert str(seen[0].url) == "https://orders.example/api/orders/7"


def test_get_json_raises_for_error_status():
    client = httpx.Client(base_url="https://orders.example/api/", transport=httpx.MockTransport(echo_handler))
    agent = OrderAgent(client)

    with pytest.raises(httpx.HTTPStatusError):
        agent.get_json("orders/missing")

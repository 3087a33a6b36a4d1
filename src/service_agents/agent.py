from __future__ import annotations
from typing import Any, Dict

import httpx


class AgentBase:
    """Typed wrapper around the named HTTP client of one remote service.

    Subclasses add service-specific calls on top of the helpers below; paths
    are resolved against the client's base address.
    """

    def __init__(self, client: httpx.Client) -> None:
        self.client = client

    @classmethod
    def name(cls) -> str:
        return cls.__name__

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.client.get(path, **kwargs)

    def get_json(self, path: str, **kwargs: Any) -> Any:
        resp = self.client.get(path, **kwargs)
        resp.raise_for_status()
        return resp.json()

    def post_json(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        return self.client.post(path, json=payload)

    def put_json(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        return self.client.put(path, json=payload)

    def delete(self, path: str) -> httpx.Response:
        return self.client.delete(path)

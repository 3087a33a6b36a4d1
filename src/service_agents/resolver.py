from __future__ import annotations
import importlib
import inspect
from types import ModuleType
from typing import Iterable, Set, Type, Union

from .agent import AgentBase
from .errors import AgentNotFoundError, AmbiguousAgentError


def candidate_types(module: Union[str, ModuleType]) -> Set[type]:
    """Classes exposed by ``module`` (imported ones included)."""
    if isinstance(module, str):
        module = importlib.import_module(module)
    return {obj for _, obj in inspect.getmembers(module, inspect.isclass)}


def _is_agent(t: type) -> bool:
    return (
        issubclass(t, AgentBase)
        and t is not AgentBase
        and not inspect.isabstract(t)
    )


def resolve(candidates: Iterable[type], logical_name: str) -> Type[AgentBase]:
    """Find the single agent class whose name starts with ``logical_name``."""
    matches = [t for t in set(candidates) if _is_agent(t) and t.__name__.startswith(logical_name)]
    if not matches:
        raise AgentNotFoundError(logical_name)
    if len(matches) > 1:
        raise AmbiguousAgentError(logical_name, [t.__name__ for t in matches])
    return matches[0]

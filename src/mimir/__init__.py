"""Mimir — a sandboxed ReAct agent execution core."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mimir.config import ConfigLoader as ConfigLoader
    from mimir.config import MimirConfig as MimirConfig
    from mimir.core.agent import Agent as Agent
    from mimir.core.agent import AgentFactory as AgentFactory
    from mimir.runner import AgentRunner as AgentRunner

_EXPORTS = {
    "Agent": "mimir.core.agent",
    "AgentFactory": "mimir.core.agent",
    "AgentRunner": "mimir.runner",
    "ConfigLoader": "mimir.config",
    "MimirConfig": "mimir.config",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mimir' has no attribute {name!r}")

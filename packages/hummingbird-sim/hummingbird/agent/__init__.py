"""Module for agent."""

__all__ = [
    "DEFAULT_MAX_STEPS",
    "AgentConfig",
    "HummingbirdAgent",
    "RewardConfig",
    "SpawnConfig",
]

from hummingbird.agent.agent import (
    DEFAULT_MAX_STEPS,
    AgentConfig,
    HummingbirdAgent,
    RewardConfig,
    SpawnConfig,
)

"""Load and configure simulation settings from a YAML file."""

from pathlib import Path

import numpy as np
import yaml
from pydantic import BaseModel, field_validator

from hummingbird.agent import AgentConfig, RewardConfig, SpawnConfig
from hummingbird.brain import Brain, BrainType, HeuristicBrain, RandomBrain
from hummingbird.env import AREA_DIAMETER, FlowerLayoutConfig, PhysicsConfig
from hummingbird.logging_config import logger

DEFAULT_EPISODES = 1


class AreaConfig(BaseModel):
    """Configuration for the flower area itself."""

    diameter: float = AREA_DIAMETER
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    layout: FlowerLayoutConfig | None = None

    def get_layout_config(self) -> FlowerLayoutConfig:
        """Get flower layout configuration with defaults."""
        return self.layout or FlowerLayoutConfig()


class SimulationConfig(BaseModel):
    """Configuration for a simulation session."""

    brain: str = BrainType.HEURISTIC.value
    episodes: int = DEFAULT_EPISODES
    seed: int | None = None
    agent: AgentConfig | None = None
    reward: RewardConfig | None = None
    spawn: SpawnConfig | None = None
    area: AreaConfig | None = None
    physics: PhysicsConfig | None = None

    @field_validator("brain")
    @classmethod
    def validate_brain(cls, v: str) -> str:
        """Validate the brain name is known."""
        valid_brains = [brain_type.value for brain_type in BrainType]
        if v not in valid_brains:
            msg = f"Invalid brain: '{v}'. Supported brains are {valid_brains}."
            raise ValueError(msg)
        return v

    @field_validator("episodes")
    @classmethod
    def validate_episodes(cls, v: int) -> int:
        """Validate at least one episode is requested."""
        if v < 1:
            msg = f"episodes must be at least 1, got {v}."
            raise ValueError(msg)
        return v


def load_simulation_config(config_path: str | Path) -> SimulationConfig:
    """
    Load simulation configuration from a YAML file and parse it into a SimulationConfig model.

    Args:
        config_path (str | Path): Path to the YAML configuration file.

    Returns
    -------
        SimulationConfig: Parsed configuration as a Pydantic model.
    """
    with Path(config_path).open() as file:
        data = yaml.safe_load(file) or {}
        return SimulationConfig(**data)


def configure_agent(config: SimulationConfig) -> AgentConfig:
    """Get the agent configuration, falling back to defaults."""
    if config.agent is None:
        logger.warning("No agent configuration found. Using default AgentConfig.")
        return AgentConfig()
    return config.agent


def configure_reward(config: SimulationConfig) -> RewardConfig:
    """Get the reward configuration, falling back to defaults."""
    if config.reward is None:
        logger.warning("No reward configuration found. Using default RewardConfig.")
        return RewardConfig()
    return config.reward


def configure_spawn(config: SimulationConfig) -> SpawnConfig:
    """Get the spawn configuration, falling back to defaults."""
    if config.spawn is None:
        logger.warning("No spawn configuration found. Using default SpawnConfig.")
        return SpawnConfig()
    return config.spawn


def configure_area(config: SimulationConfig) -> AreaConfig:
    """Get the flower area configuration, falling back to defaults."""
    if config.area is None:
        logger.warning("No area configuration found. Using default AreaConfig.")
        return AreaConfig()
    return config.area


def configure_physics(config: SimulationConfig) -> PhysicsConfig:
    """Get the physics configuration, falling back to defaults."""
    if config.physics is None:
        logger.warning("No physics configuration found. Using default PhysicsConfig.")
        return PhysicsConfig()
    return config.physics


def configure_brain(
    config: SimulationConfig,
    rng: np.random.Generator,
    area_diameter: float = AREA_DIAMETER,
) -> Brain:
    """
    Create the brain named in the configuration.

    Args:
        config (SimulationConfig): Simulation configuration object.
        rng (np.random.Generator): Random source for stochastic brains.
        area_diameter (float): Diameter of the flower area.

    Returns
    -------
        Brain: The configured brain.
    """
    match config.brain:
        case BrainType.HEURISTIC.value:
            return HeuristicBrain(area_diameter=area_diameter)
        case BrainType.RANDOM.value:
            return RandomBrain(rng)
        case _:
            error_message = f"Unknown brain type: {config.brain}."
            logger.error(error_message)
            raise ValueError(error_message)

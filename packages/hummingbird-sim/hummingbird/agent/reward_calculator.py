"""Reward calculation logic for the hummingbird agent."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from hummingbird.logging_config import logger

if TYPE_CHECKING:
    from hummingbird.agent import RewardConfig


class RewardCalculator:
    """Calculates rewards for feeding and boundary collisions.

    Feeding and hitting the area boundary are the only reward sources; there is
    no per-step shaping. Rewards are only given in training mode.

    Parameters
    ----------
    config : RewardConfig
        Configuration for reward magnitudes.

    Attributes
    ----------
    config : RewardConfig
        The reward configuration.
    """

    def __init__(self, config: RewardConfig) -> None:
        """Initialize the reward calculator.

        Parameters
        ----------
        config : RewardConfig
            Configuration for reward magnitudes.
        """
        self.config = config

    def on_feed(
        self,
        consumed_amount: float,
        approach_alignment: float,
        *,
        training_mode: bool,
    ) -> float:
        """Calculate the reward for a feeding contact.

        The reward is a flat amount plus a bonus for approaching the flower
        head-on. The amount of nectar consumed does not change the reward.

        Parameters
        ----------
        consumed_amount : float
            Nectar actually received (logged only).
        approach_alignment : float
            Dot product of the agent's forward direction and the flower's
            inward normal.
        training_mode : bool
            Whether the agent is training.

        Returns
        -------
        float
            Reward delta; 0.0 outside training mode.
        """
        if not training_mode:
            return 0.0

        bonus = self.config.reward_alignment_bonus * float(np.clip(approach_alignment, 0.0, 1.0))
        reward = self.config.reward_nectar + bonus
        logger.debug(
            f"[Reward] Nectar reward: {reward} "
            f"(consumed={consumed_amount}, alignment={approach_alignment:.3f})",
        )
        return reward

    def on_boundary_collision(self, *, training_mode: bool) -> float:
        """Calculate the reward for colliding with the area boundary.

        Parameters
        ----------
        training_mode : bool
            Whether the agent is training.

        Returns
        -------
        float
            Negative reward delta; 0.0 outside training mode.
        """
        if not training_mode:
            return 0.0

        penalty = self.config.penalty_boundary_collision
        logger.debug(f"[Penalty] Boundary collision penalty applied: {-penalty}")
        return -penalty

"""Episode execution for the hummingbird agent."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from hummingbird.errors import SpawnError
from hummingbird.logging_config import logger
from hummingbird.report.dtypes import TerminationReason

if TYPE_CHECKING:
    from hummingbird.agent import HummingbirdAgent
    from hummingbird.brain import Brain
    from hummingbird.env.physics import PhysicsWorld


@dataclass
class EpisodeData:
    """Data collected during a single simulation episode.

    Attributes
    ----------
    steps : int
        The number of fixed steps taken in the episode.
    rewards : float
        The total reward accumulated during the episode.
    nectar_obtained : float
        The nectar collected during the episode.
    feed_events : int
        The number of feeding contacts.
    flowers_emptied : int
        The number of flowers emptied by the agent.
    boundary_collisions : int
        The number of collisions with the area boundary.
    """

    steps: int = 0
    rewards: float = 0.0
    nectar_obtained: float = 0.0
    feed_events: int = 0
    flowers_emptied: int = 0
    boundary_collisions: int = 0


@dataclass
class EpisodeResult:
    """Result of running a single episode.

    Attributes
    ----------
    data : EpisodeData
        Statistics collected during the episode.
    termination_reason : TerminationReason
        The reason for episode termination.
    """

    data: EpisodeData
    termination_reason: TerminationReason


class EpisodeRunner(Protocol):
    """Protocol for episode execution strategies."""

    def run(
        self,
        agent: HummingbirdAgent,
        world: PhysicsWorld,
        brain: Brain,
        max_steps: int,
    ) -> EpisodeResult:
        """Execute an episode using this runner's strategy.

        Parameters
        ----------
        agent : HummingbirdAgent
            The agent, whose body must be ``world.body``.
        world : PhysicsWorld
            The physics world stepping the agent's body.
        brain : Brain
            Source of actions.
        max_steps : int
            Hard limit on the number of fixed steps.

        Returns
        -------
        EpisodeResult
            The result of the episode execution.
        """
        ...


class StandardEpisodeRunner(EpisodeRunner):
    """Runs an episode one fixed step at a time.

    Each step the runner asks the agent for an observation, the brain for an
    action, applies it, steps the physics world, dispatches boundary and
    nectar contacts to the agent and finishes with ``fixed_update``. Contacts
    are fully resolved inside the step in which they are detected.
    """

    def run(
        self,
        agent: HummingbirdAgent,
        world: PhysicsWorld,
        brain: Brain,
        max_steps: int,
    ) -> EpisodeResult:
        """Run a standard episode.

        Parameters
        ----------
        agent : HummingbirdAgent
            The agent, whose body must be ``world.body``.
        world : PhysicsWorld
            The physics world stepping the agent's body.
        brain : Brain
            Source of actions.
        max_steps : int
            Hard limit on the number of fixed steps. The agent's own step
            limit ends the episode earlier in training mode.

        Returns
        -------
        EpisodeResult
            The result of the episode execution.
        """
        try:
            agent.on_episode_begin()
        except SpawnError as exc:
            logger.warning(f"Episode aborted: {exc}")
            return EpisodeResult(
                data=agent.episode_tracker.data,
                termination_reason=TerminationReason.SPAWN_FAILED,
            )

        brain.reset()
        termination_reason = TerminationReason.MAX_STEPS

        for _ in range(max_steps):
            observation = agent.collect_observations()
            action = brain.run_brain(observation)
            agent.on_action_received(action)

            contacts = world.step(agent.beak_tip_offset)
            if contacts.boundary_collision:
                agent.on_boundary_collision()
            for nectar_collider, closest_point in contacts.nectar_contacts:
                agent.on_nectar_contact(nectar_collider, closest_point)

            agent.fixed_update()

            if agent.flower_area.flowers and agent.flower_area.flowers_with_nectar() == 0:
                termination_reason = TerminationReason.COMPLETED_ALL_NECTAR
                logger.info("All flowers emptied!")
                break
            if agent.is_done:
                break

        data = agent.episode_tracker.data
        logger.info(
            f"Episode finished after {data.steps} steps ({termination_reason.value}): "
            f"nectar={data.nectar_obtained:.2f}, reward={data.rewards:.3f}",
        )
        return EpisodeResult(data=data, termination_reason=termination_reason)

"""Tests for episode runners."""

from unittest.mock import MagicMock

import numpy as np
import pytest
from hummingbird.agent import AgentConfig, HummingbirdAgent, SpawnConfig
from hummingbird.agent.runners import EpisodeData, StandardEpisodeRunner
from hummingbird.env import PhysicsWorld, StepContacts
from hummingbird.errors import SpawnError
from hummingbird.report.dtypes import TerminationReason


@pytest.fixture
def hover_brain():
    """Create a brain that never moves."""
    brain = MagicMock()
    brain.run_brain.return_value = np.zeros(5)
    return brain


@pytest.fixture
def mock_agent():
    """Create a mock agent in an area that still has nectar."""
    agent = MagicMock()
    agent.is_done = False
    agent.flower_area.flowers = [MagicMock()]
    agent.flower_area.flowers_with_nectar.return_value = 1
    agent.episode_tracker.data = EpisodeData(steps=3)
    return agent


@pytest.fixture
def mock_world():
    """Create a mock world reporting a boundary hit and a nectar contact every step."""
    world = MagicMock()
    world.step.return_value = StepContacts(
        boundary_collision=True,
        nectar_contacts=[("nectar", np.zeros(3))],
    )
    return world


def _beak_at_nectar_agent(area, rng, **config_kwargs):
    """Create an agent that spawns with its beak tip inside the nectar."""
    world = PhysicsWorld(area)
    agent = HummingbirdAgent(
        body=world.body,
        flower_area=area,
        rng=rng,
        config=AgentConfig(nectar_per_feed=1.0, **config_kwargs),
        spawn_config=SpawnConfig(
            near_flower_distance=(0.08, 0.08),
            clearance_radius=0.01,
            near_flower_probability=1.0,
        ),
    )
    return agent, world


class TestStandardEpisodeRunnerInitialization:
    """Test standard episode runner initialization."""

    def test_initialize_runner(self):
        """Test that runner initializes correctly."""
        runner = StandardEpisodeRunner()
        assert runner is not None


class TestStandardEpisodeRunnerLoop:
    """Test the step loop with mocked collaborators."""

    def test_dispatches_contacts_every_step(self, mock_agent, mock_world, hover_brain):
        """Test contacts found by the world reach the agent in the same step."""
        result = StandardEpisodeRunner().run(mock_agent, mock_world, hover_brain, max_steps=3)

        assert result.termination_reason == TerminationReason.MAX_STEPS
        assert result.data.steps == 3
        mock_agent.on_episode_begin.assert_called_once()
        hover_brain.reset.assert_called_once()
        assert mock_agent.on_action_received.call_count == 3
        assert mock_agent.on_boundary_collision.call_count == 3
        assert mock_agent.on_nectar_contact.call_count == 3
        assert mock_agent.on_nectar_contact.call_args.args[0] == "nectar"
        assert mock_agent.fixed_update.call_count == 3

    def test_passes_beak_offset_to_world(self, mock_agent, mock_world, hover_brain):
        """Test the world is stepped with the agent's beak tip offset."""
        StandardEpisodeRunner().run(mock_agent, mock_world, hover_brain, max_steps=1)
        mock_world.step.assert_called_once_with(mock_agent.beak_tip_offset)

    def test_stops_when_agent_is_done(self, mock_agent, mock_world, hover_brain):
        """Test the agent's own step limit ends the episode."""
        mock_agent.is_done = True

        result = StandardEpisodeRunner().run(mock_agent, mock_world, hover_brain, max_steps=10)

        assert mock_world.step.call_count == 1
        assert result.termination_reason == TerminationReason.MAX_STEPS

    def test_stops_when_all_nectar_collected(self, mock_agent, mock_world, hover_brain):
        """Test emptying every flower completes the episode."""
        mock_agent.flower_area.flowers_with_nectar.return_value = 0

        result = StandardEpisodeRunner().run(mock_agent, mock_world, hover_brain, max_steps=10)

        assert mock_world.step.call_count == 1
        assert result.termination_reason == TerminationReason.COMPLETED_ALL_NECTAR

    def test_spawn_failure_aborts_episode(self, mock_agent, mock_world, hover_brain):
        """Test a failed spawn is reported instead of raised."""
        mock_agent.on_episode_begin.side_effect = SpawnError("blocked", attempts=100)

        result = StandardEpisodeRunner().run(mock_agent, mock_world, hover_brain, max_steps=10)

        assert result.termination_reason == TerminationReason.SPAWN_FAILED
        hover_brain.run_brain.assert_not_called()
        mock_world.step.assert_not_called()


class TestStandardEpisodeRunnerIntegration:
    """Integration tests for StandardEpisodeRunner with a real agent and world."""

    def test_single_flower_emptied_in_one_contact(self, single_flower_area, rng, hover_brain):
        """Test feeding a whole flower at once ends the episode with all nectar collected."""
        agent, world = _beak_at_nectar_agent(single_flower_area, rng, training_mode=False)

        result = StandardEpisodeRunner().run(agent, world, hover_brain, max_steps=10)

        assert result.termination_reason == TerminationReason.COMPLETED_ALL_NECTAR
        assert result.data.steps == 1
        assert result.data.nectar_obtained == 1.0
        assert result.data.flowers_emptied == 1
        assert result.data.rewards == 0.0
        assert agent.nearest_flower is None
        assert not agent.collect_observations().any()

    def test_training_feed_reward(self, single_flower_area, rng, hover_brain):
        """Test a head-on feed in training earns the nectar reward plus the full bonus."""
        agent, world = _beak_at_nectar_agent(single_flower_area, rng, training_mode=True)

        result = StandardEpisodeRunner().run(agent, world, hover_brain, max_steps=10)

        assert result.data.feed_events == 1
        assert result.data.rewards == pytest.approx(0.03)

    def test_step_limit_in_training(self, single_flower_area, rng, hover_brain):
        """Test a hovering agent away from flowers runs into its step limit."""
        world = PhysicsWorld(single_flower_area)
        agent = HummingbirdAgent(
            body=world.body,
            flower_area=single_flower_area,
            rng=rng,
            config=AgentConfig(training_mode=True, max_steps=5),
            spawn_config=SpawnConfig(near_flower_probability=0.0),
        )

        result = StandardEpisodeRunner().run(agent, world, hover_brain, max_steps=100)

        assert result.termination_reason == TerminationReason.MAX_STEPS
        assert result.data.steps == 5
        assert result.data.nectar_obtained == 0.0

    def test_spawn_failure_without_flowers(self, make_area, rng, hover_brain):
        """Test an inference episode in an empty area cannot spawn."""
        area = make_area()
        world = PhysicsWorld(area)
        agent = HummingbirdAgent(
            body=world.body,
            flower_area=area,
            rng=rng,
            config=AgentConfig(training_mode=False),
        )

        result = StandardEpisodeRunner().run(agent, world, hover_brain, max_steps=10)

        assert result.termination_reason == TerminationReason.SPAWN_FAILED
        assert result.data.steps == 0

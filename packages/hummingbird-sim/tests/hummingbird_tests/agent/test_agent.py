"""Tests for the hummingbird agent."""

from dataclasses import replace
from unittest.mock import MagicMock

import numpy as np
import pytest
from hummingbird.agent import AgentConfig, HummingbirdAgent, RewardConfig, SpawnConfig
from hummingbird.agent.spawn import SpawnMode
from hummingbird.env import PhysicsWorld
from hummingbird.errors import InvariantViolationError, SpawnError, UnknownNectarColliderError
from hummingbird.geometry import IDENTITY_QUATERNION, vector3


@pytest.fixture
def two_flower_area(make_flower, make_area):
    """Create an area with two flowers facing -z."""
    return make_area(
        make_flower(position=(0.0, 1.5, 0.0)),
        make_flower(position=(1.0, 1.5, 0.0)),
    )


def _make_agent(area, rng, **config_kwargs):
    world = PhysicsWorld(area)
    agent = HummingbirdAgent(
        body=world.body,
        flower_area=area,
        rng=rng,
        config=AgentConfig(**config_kwargs),
    )
    return agent, world


def _place_beak_at(agent, point):
    """Put the body so its beak tip (facing +z) is at ``point``."""
    agent.body.set_pose(np.asarray(point) - agent.beak_tip_offset, IDENTITY_QUATERNION)


class TestAgentInitialization:
    """Test agent construction."""

    def test_defaults(self, single_flower_area, rng):
        """Test default configuration values."""
        agent, _ = _make_agent(single_flower_area, rng)

        assert agent.training_mode
        assert agent.max_steps == 5000
        assert agent.config.nectar_per_feed == 0.01
        assert agent.nearest_flower is None
        assert agent.nectar_obtained == 0.0

    def test_no_step_limit_outside_training(self, single_flower_area, rng):
        """Test inference runs are unlimited."""
        agent, _ = _make_agent(single_flower_area, rng, training_mode=False, max_steps=10)

        assert agent.max_steps == 0
        for _ in range(20):
            agent.fixed_update()
        assert not agent.is_done

    def test_step_limit_in_training(self, single_flower_area, rng):
        """Test the agent reports done at the step limit."""
        agent, _ = _make_agent(single_flower_area, rng, max_steps=3)

        for _ in range(3):
            assert not agent.is_done
            agent.fixed_update()
        assert agent.is_done

    def test_negative_max_steps_rejected(self):
        """Test a negative step limit is invalid."""
        with pytest.raises(ValueError, match="max_steps"):
            AgentConfig(max_steps=-1)


class TestEpisodeBegin:
    """Test starting an episode."""

    def test_training_resets_flowers(self, single_flower_area, rng):
        """Test training episodes start with full flowers."""
        agent, _ = _make_agent(single_flower_area, rng)
        single_flower_area.flowers[0].feed(0.5)

        agent.on_episode_begin()

        assert single_flower_area.flowers[0].nectar_amount == 1.0

    def test_inference_keeps_flowers(self, single_flower_area, rng):
        """Test inference episodes leave the flowers alone."""
        agent, _ = _make_agent(single_flower_area, rng, training_mode=False)
        single_flower_area.flowers[0].feed(0.5)

        agent.on_episode_begin()

        assert single_flower_area.flowers[0].nectar_amount == 0.5
        assert agent.last_spawn_mode == SpawnMode.NEAR_FLOWER

    def test_resets_episode_state(self, single_flower_area, rng):
        """Test statistics, velocity and turn rates are cleared."""
        agent, world = _make_agent(single_flower_area, rng)
        agent.add_reward(1.0)
        agent.fixed_update()
        agent.smoothed_pitch_change = 0.7
        world.body.velocity = vector3(1.0, 0.0, 0.0)

        agent.on_episode_begin()

        assert agent.cumulative_reward == 0.0
        assert agent.step_count == 0
        assert agent.smoothed_pitch_change == 0.0
        np.testing.assert_array_equal(world.body.velocity, np.zeros(3))

    def test_selects_nearest_flower(self, single_flower_area, rng):
        """Test the nearest flower is known right after spawning."""
        agent, _ = _make_agent(single_flower_area, rng)

        agent.on_episode_begin()

        assert agent.nearest_flower is single_flower_area.flowers[0]

    def test_spawn_is_collision_free(self, two_flower_area, rng):
        """Test the spawn pose does not overlap any collider."""
        agent, world = _make_agent(two_flower_area, rng)

        for _ in range(10):
            agent.on_episode_begin()
            assert world.overlap_sphere(world.body.position, 0.05) == 0

    def test_spawn_failure_propagates(self, make_area, rng):
        """Test the agent raises when no spawn is possible."""
        agent, _ = _make_agent(make_area(), rng, training_mode=False)

        with pytest.raises(SpawnError):
            agent.on_episode_begin()


class TestActions:
    """Test applying actions."""

    def test_action_applies_force_and_rotation(self, single_flower_area, rng):
        """Test an action moves and turns the body."""
        agent, world = _make_agent(single_flower_area, rng)
        world.body.set_pose(vector3(3.0, 3.0, 3.0), IDENTITY_QUATERNION)

        agent.on_action_received(np.array([0.0, 0.0, 1.0, 0.0, 1.0]))
        world.step(agent.beak_tip_offset)

        assert world.body.position[2] > 3.0
        assert agent.smoothed_yaw_change == pytest.approx(0.04)

    def test_action_uses_body_interface(self, rng, single_flower_area):
        """Test the agent drives any body through the body interface."""
        body = MagicMock()
        body.current_euler_rotation.return_value = vector3(0.0, 0.0, 0.0)
        agent = HummingbirdAgent(body=body, flower_area=single_flower_area, rng=rng)

        agent.on_action_received(np.array([1.0, 0.0, 0.0, 0.0, 0.0]))

        np.testing.assert_allclose(body.apply_force.call_args.args[0], [2.0, 0.0, 0.0])
        body.set_rotation_euler.assert_called_once()


class TestFreeze:
    """Test freezing the agent."""

    def test_freeze_rejected_in_training(self, single_flower_area, rng):
        """Test freezing is not allowed while training."""
        agent, _ = _make_agent(single_flower_area, rng)

        with pytest.raises(InvariantViolationError):
            agent.freeze()
        with pytest.raises(InvariantViolationError):
            agent.unfreeze()

    def test_frozen_agent_ignores_actions(self, single_flower_area, rng):
        """Test a frozen agent neither moves nor turns."""
        agent, world = _make_agent(single_flower_area, rng, training_mode=False)
        world.body.set_pose(vector3(3.0, 3.0, 3.0), IDENTITY_QUATERNION)

        agent.freeze()
        agent.on_action_received(np.ones(5))
        world.step(agent.beak_tip_offset)

        assert agent.frozen
        assert world.body.sleeping
        np.testing.assert_allclose(world.body.position, [3.0, 3.0, 3.0])
        assert agent.smoothed_yaw_change == 0.0

    def test_unfreeze_resumes(self, single_flower_area, rng):
        """Test actions take effect again after unfreezing."""
        agent, world = _make_agent(single_flower_area, rng, training_mode=False)
        world.body.set_pose(vector3(3.0, 3.0, 3.0), IDENTITY_QUATERNION)
        agent.freeze()

        agent.unfreeze()
        agent.on_action_received(np.array([0.0, 0.0, 1.0, 0.0, 0.0]))
        world.step(agent.beak_tip_offset)

        assert not world.body.sleeping
        assert world.body.position[2] > 3.0


class TestNectarContact:
    """Test feeding on nectar contacts."""

    def test_beak_tip_contact_feeds(self, single_flower_area, rng):
        """Test a contact at the beak tip removes nectar and pays a reward."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng)
        _place_beak_at(agent, flower.center_position)

        reward = agent.on_nectar_contact(flower.nectar_collider, flower.center_position)

        assert flower.nectar_amount == pytest.approx(0.99)
        assert agent.nectar_obtained == pytest.approx(0.01)
        # Facing +z into a flower facing -z is a head-on approach
        assert reward == pytest.approx(0.03)
        assert agent.cumulative_reward == pytest.approx(0.03)

    def test_contact_away_from_beak_ignored(self, single_flower_area, rng):
        """Test a body contact that is not at the beak tip does not feed."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng)
        _place_beak_at(agent, flower.center_position + vector3(0.0, 0.0, -0.05))

        reward = agent.on_nectar_contact(flower.nectar_collider, flower.center_position)

        assert reward == 0.0
        assert flower.nectar_amount == 1.0
        assert agent.episode_tracker.feed_events == 0

    def test_empty_flower_contact_ignored(self, single_flower_area, rng):
        """Test contacts with an empty flower do nothing."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng)
        _place_beak_at(agent, flower.center_position)
        flower.feed(1.0)

        assert agent.on_nectar_contact(flower.nectar_collider, flower.center_position) == 0.0
        assert agent.nectar_obtained == 0.0

    def test_unknown_collider_raises(self, single_flower_area, rng):
        """Test a foreign collider is an invariant violation."""
        agent, _ = _make_agent(single_flower_area, rng)

        with pytest.raises(UnknownNectarColliderError):
            agent.on_nectar_contact("elsewhere", vector3(0.0, 0.0, 0.0))

    def test_no_reward_outside_training(self, single_flower_area, rng):
        """Test inference feeding collects nectar but no reward."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng, training_mode=False)
        _place_beak_at(agent, flower.center_position)

        assert agent.on_nectar_contact(flower.nectar_collider, flower.center_position) == 0.0
        assert agent.nectar_obtained == pytest.approx(0.01)
        assert agent.cumulative_reward == 0.0

    def test_emptying_flower_moves_to_next(self, two_flower_area, rng):
        """Test the nearest flower switches once the current one is empty."""
        first, second = two_flower_area.flowers
        agent, _ = _make_agent(two_flower_area, rng, nectar_per_feed=1.0)
        _place_beak_at(agent, first.center_position)
        agent.update_nearest_flower(force_reset=True)
        assert agent.nearest_flower is first

        agent.on_nectar_contact(first.nectar_collider, first.center_position)

        assert not first.has_nectar
        assert agent.nearest_flower is second
        assert agent.episode_tracker.flowers_emptied == 1

    def test_nectar_obtained_never_decreases(self, single_flower_area, rng):
        """Test repeated feeding only ever adds nectar."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng, nectar_per_feed=0.3)
        _place_beak_at(agent, flower.center_position)
        previous = 0.0

        for _ in range(5):
            agent.on_nectar_contact(flower.nectar_collider, flower.center_position)
            assert agent.nectar_obtained >= previous
            previous = agent.nectar_obtained

        assert agent.nectar_obtained == pytest.approx(1.0)


class TestBoundaryCollision:
    """Test boundary collisions."""

    def test_penalty_in_training(self, single_flower_area, rng):
        """Test hitting the boundary costs reward."""
        world = PhysicsWorld(single_flower_area)
        agent = HummingbirdAgent(
            body=world.body,
            flower_area=single_flower_area,
            rng=rng,
            reward_config=RewardConfig(penalty_boundary_collision=0.25),
        )

        assert agent.on_boundary_collision() == -0.25
        assert agent.cumulative_reward == -0.25
        assert agent.episode_tracker.boundary_collisions == 1

    def test_no_penalty_outside_training(self, single_flower_area, rng):
        """Test boundary hits are free outside training."""
        agent, _ = _make_agent(single_flower_area, rng, training_mode=False)
        assert agent.on_boundary_collision() == 0.0
        assert agent.episode_tracker.boundary_collisions == 1


class TestObservationsAndDebug:
    """Test observations and debug output."""

    def test_observation_without_flowers(self, make_area, rng):
        """Test an agent with nothing to see observes zeros."""
        agent, _ = _make_agent(make_area(), rng)
        observation = agent.collect_observations()
        assert observation.shape == (10,)
        assert not observation.any()

    def test_observation_of_nearest_flower(self, single_flower_area, rng):
        """Test the observation describes the nearest flower."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng)
        _place_beak_at(agent, flower.center_position + vector3(0.0, 0.0, -1.0))
        agent.update_nearest_flower()

        observation = agent.collect_observations()

        np.testing.assert_allclose(observation[4:7], [0.0, 0.0, 1.0], atol=1e-6)
        assert observation[9] == pytest.approx(1.0 / 20.0)

    def test_render_update(self, single_flower_area, rng):
        """Test the debug line runs from the beak tip to the nearest flower."""
        flower = single_flower_area.flowers[0]
        agent, _ = _make_agent(single_flower_area, rng)
        assert agent.render_update() is None

        _place_beak_at(agent, vector3(0.0, 1.5, -1.0))
        agent.update_nearest_flower()
        start, end = agent.render_update()

        np.testing.assert_allclose(start, [0.0, 1.5, -1.0], atol=1e-12)
        np.testing.assert_allclose(end, flower.center_position)

    def test_render_update_changes_nothing(self, two_flower_area, rng):
        """Test drawing the debug line leaves the simulation state alone."""
        agent, _ = _make_agent(two_flower_area, rng)
        _place_beak_at(agent, vector3(0.3, 1.5, -1.0))
        agent.update_nearest_flower()
        agent.fixed_update()
        nearest_before = agent.nearest_flower_index
        data_before = replace(agent.episode_tracker.data)
        position_before = agent.body.position.copy()
        rotation_before = agent.body.rotation.copy()
        velocity_before = agent.body.velocity.copy()

        for _ in range(3):
            agent.render_update()

        assert agent.nearest_flower_index == nearest_before
        assert agent.episode_tracker.data == data_before
        np.testing.assert_array_equal(agent.body.position, position_before)
        np.testing.assert_array_equal(agent.body.rotation, rotation_before)
        np.testing.assert_array_equal(agent.body.velocity, velocity_before)

    def test_fixed_update_reselects_after_external_emptying(self, two_flower_area, rng):
        """Test a flower emptied by someone else is replaced on the next step."""
        first, second = two_flower_area.flowers
        agent, _ = _make_agent(two_flower_area, rng)
        _place_beak_at(agent, first.center_position + vector3(0.0, 0.0, -0.5))
        agent.update_nearest_flower()
        assert agent.nearest_flower is first

        first.feed(1.0)
        agent.fixed_update()

        assert agent.nearest_flower is second


class TestSpawnConfig:
    """Test spawn configuration passed to the agent."""

    def test_spawn_config_used(self, single_flower_area, rng):
        """Test the configured probability drives the spawn mode."""
        world = PhysicsWorld(single_flower_area)
        agent = HummingbirdAgent(
            body=world.body,
            flower_area=single_flower_area,
            rng=rng,
            spawn_config=SpawnConfig(near_flower_probability=0.0),
        )

        agent.on_episode_begin()

        assert agent.last_spawn_mode == SpawnMode.FREE_ROAM

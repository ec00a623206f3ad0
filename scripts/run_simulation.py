"""Run the Hummingbird foraging simulation."""

import argparse
from datetime import UTC, datetime

from hummingbird.agent import HummingbirdAgent
from hummingbird.agent.runners import StandardEpisodeRunner
from hummingbird.brain import BrainType
from hummingbird.env import FlowerArea, PhysicsWorld, build_scene
from hummingbird.logging_config import logger, set_log_level
from hummingbird.report.dtypes import SimulationResult
from hummingbird.report.summary import summary
from hummingbird.utils import SessionSeeds, get_rng
from hummingbird.utils.config_loader import (
    SimulationConfig,
    configure_agent,
    configure_area,
    configure_brain,
    configure_physics,
    configure_reward,
    configure_spawn,
    load_simulation_config,
)

# Hard cap on steps per episode when the agent has no step limit (inference)
DEFAULT_INFERENCE_STEPS = 5000


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Run the Hummingbird foraging simulation.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "NONE"],
        help="Set the logging level (default: INFO). Use 'NONE' to disable logging.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--episodes",
        type=int,
        help="Number of episodes to run (overrides the configuration file).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Base random seed (overrides the configuration file).",
    )
    brain_choices = [brain_type.value for brain_type in BrainType]
    parser.add_argument(
        "--brain",
        type=str,
        choices=brain_choices,
        help=f"Brain driving the agent ({', '.join(brain_choices)}).",
    )
    parser.add_argument(
        "--training",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run in training mode (flower resets, rewards and step limits).",
    )
    parser.add_argument(
        "--inference-steps",
        type=int,
        default=DEFAULT_INFERENCE_STEPS,
        help="Steps per episode when not training "
        f"(default: {DEFAULT_INFERENCE_STEPS}).",
    )

    return parser.parse_args()


def main() -> None:
    """Run the Hummingbird foraging simulation."""
    args = parse_arguments()
    set_log_level(args.log_level)

    config = load_simulation_config(args.config) if args.config else SimulationConfig()
    overrides = {
        "episodes": args.episodes,
        "seed": args.seed,
        "brain": args.brain,
    }
    config = config.model_copy(
        update={key: value for key, value in overrides.items() if value is not None},
    )

    agent_config = configure_agent(config)
    if args.training is not None:
        agent_config = agent_config.model_copy(update={"training_mode": args.training})
    reward_config = configure_reward(config)
    spawn_config = configure_spawn(config)
    area_config = configure_area(config)
    physics_config = configure_physics(config)

    seeds = SessionSeeds.from_base(config.seed)

    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    logger.info(f"Session ID: {timestamp}")
    logger.info(f"Session seeds: {seeds.as_dict()}")

    scene_rng = get_rng(seeds.layout)
    scene = build_scene(area_config.get_layout_config(), scene_rng, area_config.position)
    flower_area = FlowerArea.from_scene(
        scene,
        position=area_config.position,
        diameter=area_config.diameter,
    )
    world = PhysicsWorld(flower_area, physics_config)

    agent_rng = get_rng(seeds.agent)
    agent = HummingbirdAgent(
        body=world.body,
        flower_area=flower_area,
        rng=agent_rng,
        config=agent_config,
        reward_config=reward_config,
        spawn_config=spawn_config,
        fixed_delta_time=physics_config.fixed_delta_time,
    )
    brain = configure_brain(
        config,
        get_rng(seeds.brain),
        area_diameter=flower_area.diameter,
    )

    max_steps = agent.max_steps if agent.max_steps > 0 else args.inference_steps
    runner = StandardEpisodeRunner()
    all_results: list[SimulationResult] = []

    try:
        for episode in range(1, config.episodes + 1):
            logger.info(f"Starting episode {episode}/{config.episodes}")
            result = runner.run(agent, world, brain, max_steps)
            all_results.append(
                SimulationResult(
                    episode=episode,
                    steps=result.data.steps,
                    total_reward=result.data.rewards,
                    nectar_obtained=result.data.nectar_obtained,
                    feed_events=result.data.feed_events,
                    flowers_emptied=result.data.flowers_emptied,
                    boundary_collisions=result.data.boundary_collisions,
                    termination_reason=result.termination_reason,
                ),
            )
    except KeyboardInterrupt:
        logger.warning("KeyboardInterrupt detected. Summarizing finished episodes.")

    summary(all_results, session_id=timestamp, seeds=seeds)


if __name__ == "__main__":
    main()

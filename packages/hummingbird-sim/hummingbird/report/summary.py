"""Summary reporting for Hummingbird simulation results."""

from rich import box
from rich.console import Console
from rich.table import Table

from hummingbird.logging_config import logger
from hummingbird.report.dtypes import SimulationResult
from hummingbird.utils.seeding import SessionSeeds


def summary(
    all_results: list[SimulationResult],
    session_id: str,
    console: Console | None = None,
    seeds: SessionSeeds | None = None,
) -> Table | None:
    """
    Print a summary of the episode results.

    Parameters
    ----------
    all_results : list[SimulationResult]
        Results of every finished episode.
    session_id : str
        The unique identifier for the simulation session.
    console : Console | None, optional
        Console to print to, by default a new stdout console.
    seeds : SessionSeeds | None, optional
        Seeds of the session, printed so the run can be reproduced.

    Returns
    -------
    Table | None
        The rendered table, or None when there is nothing to summarize.
    """
    console = console or Console()

    if not all_results:
        logger.warning("No simulation results to summarize.")
        return None

    table = Table(title=f"Session {session_id}", box=box.SIMPLE_HEAVY)
    table.add_column("Episode", justify="right")
    table.add_column("Steps", justify="right")
    table.add_column("Reward", justify="right")
    table.add_column("Nectar", justify="right")
    table.add_column("Feeds", justify="right")
    table.add_column("Emptied", justify="right")
    table.add_column("Boundary hits", justify="right")
    table.add_column("Termination")

    for result in all_results:
        table.add_row(
            str(result.episode),
            str(result.steps),
            f"{result.total_reward:.3f}",
            f"{result.nectar_obtained:.2f}",
            str(result.feed_events),
            str(result.flowers_emptied),
            str(result.boundary_collisions),
            result.termination_reason.value,
        )

    total_episodes = len(all_results)
    average_reward = sum(result.total_reward for result in all_results) / total_episodes
    average_nectar = sum(result.nectar_obtained for result in all_results) / total_episodes
    success_rate = sum(result.success for result in all_results) / total_episodes * 100

    console.print(table)
    summary_line = (
        f"Episodes: {total_episodes} | Average reward: {average_reward:.3f} | "
        f"Average nectar: {average_nectar:.2f} | Feeding success rate: {success_rate:.1f}%"
    )
    console.print(summary_line)
    logger.info(summary_line)

    if seeds is not None:
        seed_line = "Seeds: " + ", ".join(
            f"{name}={value}" for name, value in seeds.as_dict().items()
        )
        console.print(seed_line)
        logger.info(seed_line)

    return table

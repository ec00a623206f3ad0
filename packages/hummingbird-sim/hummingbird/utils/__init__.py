"""Utilities module for Hummingbird."""

from hummingbird.utils.seeding import (
    SessionSeeds,
    derive_run_seed,
    ensure_seed,
    generate_seed,
    get_rng,
)

__all__ = [
    "SessionSeeds",
    "derive_run_seed",
    "ensure_seed",
    "generate_seed",
    "get_rng",
]

"""
Seeds for reproducible foraging sessions.

A session starts from one base seed. Each stochastic component (scene layout,
agent spawning and plant jitter, brain) receives its own generator seeded from
a value derived from that base, so changing how often one component draws does
not shift the others.
"""

import secrets
from dataclasses import dataclass

import numpy as np

# Seeds are kept in numpy's 32-bit range
MAX_SEED = 2**32

LAYOUT_STREAM = 0
AGENT_STREAM = 1
BRAIN_STREAM = 2


def generate_seed() -> int:
    """Draw a fresh base seed in ``[0, MAX_SEED)``."""
    return secrets.randbelow(MAX_SEED)


def ensure_seed(seed: int | None = None) -> int:
    """Return ``seed``, or a freshly generated one when it is None."""
    if seed is None:
        return generate_seed()
    return seed


def get_rng(seed: int | None = None) -> np.random.Generator:
    """
    Create a numpy Generator for one component.

    Parameters
    ----------
    seed : int | None, optional
        Seed for the generator; a fresh one is drawn when None.

    Returns
    -------
    np.random.Generator
        The seeded generator.
    """
    return np.random.default_rng(ensure_seed(seed))


def derive_run_seed(base_seed: int, stream: int) -> int:
    """
    Derive an independent seed for one stream of a session.

    The base seed and the stream index are mixed through a ``SeedSequence``,
    so neighbouring base seeds do not share streams.

    Parameters
    ----------
    base_seed : int
        The session's base seed.
    stream : int
        Index of the component stream, see ``LAYOUT_STREAM`` and friends.

    Returns
    -------
    int
        A seed in ``[0, MAX_SEED)``.
    """
    return int(np.random.SeedSequence([base_seed, stream]).generate_state(1)[0])


@dataclass(frozen=True)
class SessionSeeds:
    """Seeds used by one simulation session."""

    base: int
    layout: int
    agent: int
    brain: int

    @classmethod
    def from_base(cls, base_seed: int | None = None) -> "SessionSeeds":
        """Derive every component seed from a base seed, generating it if missing."""
        base = ensure_seed(base_seed)
        return cls(
            base=base,
            layout=derive_run_seed(base, LAYOUT_STREAM),
            agent=derive_run_seed(base, AGENT_STREAM),
            brain=derive_run_seed(base, BRAIN_STREAM),
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "base": self.base,
            "layout": self.layout,
            "agent": self.agent,
            "brain": self.brain,
        }

import numpy as np
import pytest
from hummingbird.env import Flower, FlowerArea, SceneNode
from hummingbird.geometry import vector3

# A flower facing -z, floating well inside the default area
FLOWER_POSITION = (0.0, 1.5, 0.0)
FLOWER_FACING = (0.0, 0.0, -1.0)


@pytest.fixture
def rng():
    """Create a seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def make_flower():
    """Create standalone flowers (no plant) with unique nectar handles."""
    counter = iter(range(1_000))

    def _make(position=FLOWER_POSITION, up=FLOWER_FACING, **kwargs):
        kwargs.setdefault("nectar_collider", f"nectar_{next(counter)}")
        return Flower(local_position=vector3(*position), local_up=vector3(*up), **kwargs)

    return _make


@pytest.fixture
def make_area():
    """Create a discovered flower area holding the given flowers."""

    def _make(*flowers, **kwargs):
        root = SceneNode(name="FlowerArea")
        for index, flower in enumerate(flowers):
            root.add_child(SceneNode(name=f"Flower_{index}", flower=flower))
        return FlowerArea.from_scene(root, **kwargs)

    return _make


@pytest.fixture
def single_flower_area(make_flower, make_area):
    """Create an area with one flower at the default position."""
    return make_area(make_flower())

"""Core type definitions for Hummingbird.

This module provides type aliases used across multiple submodules
for representing vectors, rotations and colors.
"""

import numpy as np

# =============================================================================
# Spatial Types
# =============================================================================

# World or local 3D vector (x, y, z)
Vector3 = np.ndarray

# Rotation quaternion stored as (x, y, z, w)
Quaternion = np.ndarray

# Euler rotation in degrees (pitch, yaw, roll)
EulerAngles = np.ndarray

# =============================================================================
# Visual Types
# =============================================================================

# RGB color with components in [0, 1]
Color = tuple[float, float, float]

# Debug line drawn from the beak tip to the nearest flower
DebugLine = tuple[Vector3, Vector3]

# =============================================================================
# Observation Types
# =============================================================================

# Number of values in an agent observation
OBSERVATION_SIZE = 10

# Number of values in an agent action
ACTION_SIZE = 5

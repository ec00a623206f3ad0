"""
Vector and rotation helpers for the flower area.

The scene uses a left-handed, y-up frame: +x is right, +y is up and +z is
forward. Quaternions are stored as ``[x, y, z, w]`` numpy arrays and Euler
angles are ``[pitch, yaw, roll]`` in degrees, applied roll first, then pitch,
then yaw. With this convention a positive pitch tilts the nose down.
"""

import numpy as np

from hummingbird.dtypes import Quaternion, Vector3

EPSILON = 1e-9

RIGHT = np.array([1.0, 0.0, 0.0])
UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])
IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0])


def vector3(x: float, y: float, z: float) -> Vector3:
    """Build a float64 vector from three components."""
    return np.array([x, y, z], dtype=np.float64)


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Scale a vector to unit length.

    Vectors shorter than ``EPSILON`` are returned as zeros rather than NaN.
    """
    vector = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(vector)
    if norm < EPSILON:
        return np.zeros_like(vector)
    return vector / norm


def quaternion_multiply(a: Quaternion, b: Quaternion) -> Quaternion:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return np.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ],
    )


def _axis_quaternion(axis: int, degrees: float) -> Quaternion:
    half = np.radians(degrees) / 2.0
    quaternion = np.zeros(4)
    quaternion[axis] = np.sin(half)
    quaternion[3] = np.cos(half)
    return quaternion


def euler_to_quaternion(euler: Vector3) -> Quaternion:
    """
    Convert ``[pitch, yaw, roll]`` degrees to a quaternion.

    Parameters
    ----------
    euler : Vector3
        Rotation about x, y and z in degrees.

    Returns
    -------
    Quaternion
        Unit quaternion ``[x, y, z, w]``.
    """
    pitch, yaw, roll = (float(angle) for angle in euler)
    qx = _axis_quaternion(0, pitch)
    qy = _axis_quaternion(1, yaw)
    qz = _axis_quaternion(2, roll)
    return quaternion_multiply(qy, quaternion_multiply(qx, qz))


def quaternion_to_matrix(quaternion: Quaternion) -> np.ndarray:
    """Convert a quaternion to a 3x3 rotation matrix."""
    x, y, z, w = normalize_quaternion(quaternion)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
            [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
            [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
        ],
    )


def matrix_to_quaternion(matrix: np.ndarray) -> Quaternion:
    """Convert a 3x3 rotation matrix to a unit quaternion."""
    m = matrix
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0:
        s = np.sqrt(trace + 1.0) * 2
        quaternion = np.array(
            [
                (m[2, 1] - m[1, 2]) / s,
                (m[0, 2] - m[2, 0]) / s,
                (m[1, 0] - m[0, 1]) / s,
                0.25 * s,
            ],
        )
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2]) * 2
        quaternion = np.array(
            [
                0.25 * s,
                (m[0, 1] + m[1, 0]) / s,
                (m[0, 2] + m[2, 0]) / s,
                (m[2, 1] - m[1, 2]) / s,
            ],
        )
    elif m[1, 1] > m[2, 2]:
        s = np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2]) * 2
        quaternion = np.array(
            [
                (m[0, 1] + m[1, 0]) / s,
                0.25 * s,
                (m[1, 2] + m[2, 1]) / s,
                (m[0, 2] - m[2, 0]) / s,
            ],
        )
    else:
        s = np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1]) * 2
        quaternion = np.array(
            [
                (m[0, 2] + m[2, 0]) / s,
                (m[1, 2] + m[2, 1]) / s,
                0.25 * s,
                (m[1, 0] - m[0, 1]) / s,
            ],
        )
    return normalize_quaternion(quaternion)


def quaternion_to_euler(quaternion: Quaternion) -> Vector3:
    """
    Convert a quaternion to ``[pitch, yaw, roll]`` degrees.

    Angles are wrapped into ``[0, 360)``, so a slight nose-up pitch is reported
    as a value just below 360.
    """
    m = quaternion_to_matrix(quaternion)
    sin_pitch = float(np.clip(-m[1, 2], -1.0, 1.0))
    pitch = np.arcsin(sin_pitch)
    if abs(sin_pitch) < 1.0 - 1e-7:
        yaw = np.arctan2(m[0, 2], m[2, 2])
        roll = np.arctan2(m[1, 0], m[1, 1])
    else:
        # Gimbal lock: fold roll into yaw
        yaw = np.arctan2(-m[2, 0], m[0, 0])
        roll = 0.0
    return np.degrees(np.array([pitch, yaw, roll])) % 360.0


def normalize_quaternion(quaternion: Quaternion) -> Quaternion:
    """Scale a quaternion to unit length, falling back to identity."""
    quaternion = np.asarray(quaternion, dtype=np.float64)
    norm = np.linalg.norm(quaternion)
    if norm < EPSILON:
        return IDENTITY_QUATERNION.copy()
    return quaternion / norm


def rotate_vector(quaternion: Quaternion, vector: Vector3) -> Vector3:
    """Rotate a vector by a quaternion."""
    q = normalize_quaternion(quaternion)
    u = q[:3]
    w = q[3]
    v = np.asarray(vector, dtype=np.float64)
    uv = np.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * np.cross(u, uv)


def look_rotation(forward: Vector3, up: Vector3 = UP) -> Quaternion:
    """
    Rotation whose forward axis points along ``forward`` with ``up`` kept upright.

    Parameters
    ----------
    forward : Vector3
        Direction to look along. A zero vector yields the identity rotation.
    up : Vector3
        Reference up direction, by default world up.

    Returns
    -------
    Quaternion
        Unit quaternion ``[x, y, z, w]``.
    """
    z_axis = normalize(forward)
    if not z_axis.any():
        return IDENTITY_QUATERNION.copy()

    x_axis = normalize(np.cross(up, z_axis))
    if not x_axis.any():
        # Looking straight along the up vector, pick any perpendicular right axis
        x_axis = normalize(np.cross(FORWARD if abs(z_axis[2]) < 0.9 else RIGHT, z_axis))
    y_axis = np.cross(z_axis, x_axis)

    return matrix_to_quaternion(np.column_stack((x_axis, y_axis, z_axis)))


def move_towards(current: float, target: float, max_delta: float) -> float:
    """Step ``current`` toward ``target`` by at most ``max_delta``."""
    if abs(target - current) <= max_delta:
        return target
    return current + np.sign(target - current) * max_delta

"""Define error messages and exception types for the Hummingbird package."""

ERROR_UNKNOWN_NECTAR_COLLIDER = (
    "No flower is registered for nectar collider {handle!r}. "
    "Collision handles must come from the flower area's own scene."
)
ERROR_DUPLICATE_NECTAR_COLLIDER = (
    "Nectar collider {handle!r} is already registered to another flower."
)
ERROR_AREA_ALREADY_DISCOVERED = (
    "Flower area has already been discovered. Discovery runs once per area."
)
ERROR_FREEZE_IN_TRAINING = "Freeze/unfreeze is not supported in training mode."
ERROR_NO_SAFE_SPAWN = "Could not find a safe position to spawn after {attempts} attempts."
ERROR_NO_FLOWERS_TO_SPAWN_NEAR = "Cannot spawn near a flower: the flower area has no flowers."
ERROR_INVALID_ACTION_SIZE = "Action must have {expected} components, got {actual}."


class InvariantViolationError(RuntimeError):
    """A caller broke a contract the simulation relies on.

    These are not recoverable; the episode or run should be aborted.
    """


class UnknownNectarColliderError(InvariantViolationError, LookupError):
    """A collision handle was resolved that no flower owns."""


class SpawnError(RuntimeError):
    """No collision-free spawn pose was found within the allowed attempts.

    Attributes
    ----------
    attempts : int
        Number of candidate poses that were tested.
    """

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts

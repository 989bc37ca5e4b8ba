class StoreError(Exception):
    """Base class for every error raised by the store."""


class NotFoundError(StoreError):
    """The targeted record does not exist."""

    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class PinnedKeyframeError(StoreError):
    """Attempt to move or delete the pinned origin keyframe."""

    def __init__(self, keyframe_id: int, action: str = "modify") -> None:
        super().__init__(f"cannot {action} pinned keyframe {keyframe_id}")
        self.keyframe_id = keyframe_id
        self.action = action


class ConstraintViolationError(StoreError):
    """A uniqueness, foreign-key or value constraint was violated."""


class StorageUnavailableError(StoreError):
    """The database could not be opened or migrated."""

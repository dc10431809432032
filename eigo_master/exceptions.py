"""Custom exceptions for the learner-progress store and the quiz engine."""


class EigoMasterError(Exception):
    """Base exception for all EigoMaster errors."""
    pass


# ============================================================================
# STORAGE
# ============================================================================

class StorageError(EigoMasterError):
    """Base exception for persistence failures."""
    pass


class StorageUnavailable(StorageError):
    """Backing medium cannot be opened (permissions, corrupted schema, ...)."""
    pass


class NotInitialized(StorageError):
    """Store used before initialize() completed."""
    pass


class WriteError(StorageError):
    """A specific record failed to persist."""
    pass


# ============================================================================
# QUIZ SESSION
# ============================================================================

class QuizError(EigoMasterError):
    """Base exception for quiz session errors."""
    pass


class EmptyPool(QuizError):
    """Session cannot start without words."""
    pass


class InvalidStateTransition(QuizError):
    """Operation is not valid in the engine's current state."""

    def __init__(self, operation: str, state):
        self.operation = operation
        self.state = state
        super().__init__(f"{operation}() is not allowed in state {state.value}")

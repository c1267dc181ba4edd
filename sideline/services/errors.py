"""Exceptions raised by the Sideline Lineup services."""


class LineupError(ValueError):
    """An operation was refused because its preconditions do not hold.

    Raised before any state is touched, so catching it means nothing changed.
    """
    pass


class PersistenceError(RuntimeError):
    """A change could not be written to storage and was rolled back.

    Both the in-memory state and the stored documents are back to what they
    were before the operation started.
    """
    pass

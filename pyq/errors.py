"""Exceptions raised by the assessment engine."""


class PYQError(Exception):
    """Base class for engine errors."""


class MalformedBankError(PYQError):
    """The question-bank payload cannot be turned into a usable bank."""


class OutOfRangeError(PYQError):
    """A navigation index does not address a question."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Question index {index} out of range (0..{size - 1})")
        self.index = index
        self.size = size


class InvalidOperationError(PYQError):
    """An operation is not legal in the attempt's current state."""

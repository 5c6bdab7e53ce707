"""Domain exceptions, raised to callers and never swallowed by the domain."""

from __future__ import annotations


class ContentieuxError(Exception):
    """Base class for business errors."""


class ValidationFailed(ContentieuxError):
    """One or more validation rules failed; nothing has been persisted."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.messages))

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]

    @property
    def codes(self):
        return [e.code for e in self.errors]


class InvalidStateError(ContentieuxError):
    """An operation was attempted on a mandate or payment in the wrong state."""


class EntityNotFound(ContentieuxError, LookupError):
    """A case, payment or mandate could not be found."""


class NumberingExhausted(ContentieuxError):
    """The monthly numbering sequence is full."""

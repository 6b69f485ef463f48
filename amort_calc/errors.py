"""Exceptions raised by the amortization calculator.

Both error kinds derive from ``ValueError`` so callers that already guard
calculator calls with ``except ValueError`` keep working.
"""


class ScheduleError(ValueError):
    """Base class for errors that stop schedule generation."""


class ValidationError(ScheduleError):
    """The loan parameters are invalid; raised before any month is computed."""


class DomainError(ScheduleError):
    """An intermediate value became non-finite, so the schedule would be meaningless."""

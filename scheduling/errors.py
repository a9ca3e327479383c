"""Errors raised by the schedulers for invalid direct input."""


class SchedulingError(ValueError):
    """Base class; the API layer maps it to a 400 response."""


class InvalidOutcomeBatch(SchedulingError):
    pass


class InvalidGrade(SchedulingError):
    pass

"""Exception types raised by the countdown scheduler."""


class CountdownError(Exception):
    """Base class for countdown errors."""

    pass


class ValidationError(CountdownError, TypeError):
    """A registration call received something that is not callable."""

    pass


class TaskExecutionError(CountdownError):
    """A task callback raised while being evaluated.

    The original exception is chained as ``__cause__``. When raised from
    ``process_tasks``, ``failures`` holds every failure of that pass in
    evaluation order (this error first).
    """

    def __init__(self, index: int, error: BaseException):
        super().__init__(f"Task {index} failed: {error!r}")
        self.index = index
        self.error = error
        self.failures: list["TaskExecutionError"] = [self]


class ResyncError(CountdownError):
    """The time-fixer failed to produce a reference timestamp."""

    pass

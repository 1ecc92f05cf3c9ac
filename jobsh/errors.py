"""Exception types raised by builtins and the process launcher."""


class JobshError(Exception):
    """Base error. `status` is the exit status the failure maps to."""

    status = 1

    def __init__(self, message="", status=None):
        super().__init__(message)
        if status is not None:
            self.status = status


class ArityError(JobshError):
    """Wrong number of arguments for a builtin."""


class NotFoundError(JobshError):
    """Source path does not exist."""


class WrongTypeError(JobshError):
    """Source path is not a regular file."""

    status = 2


class SpawnError(JobshError):
    """A child process could not be created or exec'd."""

"""Exceptions raised for invalid API usage.

Organizational input problems never raise; they degrade to defaults with
disclosure. These exceptions signal programmer error instead.
"""


class RefereeError(Exception):
    """Base class for architecture referee errors."""


class InvalidInputError(RefereeError, ValueError):
    """The constraint input as a whole is missing."""


class InvalidModificationError(RefereeError, ValueError):
    """A session modification was rejected; session state is unchanged."""

    def __init__(self, message: str, field: str = "", value: object = None):
        super().__init__(message)
        self.field = field
        self.value = value


class SessionNotStartedError(RefereeError, RuntimeError):
    """A session operation was called before start_session()."""


class InvalidConfigError(RefereeError, ValueError):
    """A configuration file holds inconsistent thresholds."""

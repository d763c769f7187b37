"""Exceptions raised by the devladder core."""


class DevLadderError(Exception):
    """Base class for devladder errors."""


class InputShapeError(DevLadderError, ValueError):
    """Raised when an input cannot be used at all (e.g. artifacts is not a list).

    Recoverable irregularities (missing fields, unknown doc types, unknown
    formats) never raise; they degrade to "absent" or to the default ladder.
    """

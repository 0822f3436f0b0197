"""Error taxonomy shared by the store, interpreter, gateway and supervisor."""


class PengingatError(Exception):
    """Base class for every error raised by pengingat-bot."""


class FormatError(PengingatError):
    """Command text does not have the three-line event shape."""


class ValidationError(PengingatError):
    """Date or time is malformed, or the date is already in the past."""


class PersistenceError(PengingatError):
    """The event store could not be read or written."""


class TransportError(PengingatError):
    """A message could not be sent."""


class ConnectivityError(PengingatError):
    """The transport session could not be (re)established."""


class AssistantError(PengingatError):
    """The generative-text backend failed or returned nothing."""

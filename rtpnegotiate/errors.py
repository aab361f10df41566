"""Exceptions raised while validating and negotiating RTP parameters."""


class NegotiationError(Exception):
    """Base class for every error raised by this package."""


class InvalidParameterError(NegotiationError, TypeError):
    """A capability, parameter or option object is malformed."""
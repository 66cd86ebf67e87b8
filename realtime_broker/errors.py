"""
Exception types raised by the realtime broker.

Route handlers translate these into JSON error responses; everything else in the
package lets them propagate to the caller.
"""


class BrokerError(Exception):
    """Base class for all broker errors."""

    status_code = 500


class ConfigError(BrokerError):
    """Raised when required configuration is missing or invalid."""


class AuthError(BrokerError):
    """Raised when a bearer token cannot be verified."""

    status_code = 401


class InsufficientParticipantsError(BrokerError):
    """Raised when fewer than two comparable participants remain for ranking."""


class UpstreamError(BrokerError):
    """Raised when a hosted model call fails or returns unusable output."""

    status_code = 502

class LaunchpadError(Exception):
    """Base class for every error raised by the launchpad SDK."""


class SchemaError(LaunchpadError):
    """A value does not fit its field type, or the type tag is unknown."""


class TruncationError(LaunchpadError):
    """The buffer ends before the schema is fully consumed."""


class DerivationError(LaunchpadError):
    """No program-derived address exists for the given seeds."""


class ConfigError(LaunchpadError):
    pass


class NetworkError(LaunchpadError):
    """Parameter service or RPC transport failure. Never retried here."""


class ProgramRejectionError(LaunchpadError):
    """The cluster or the launchpad program refused the transaction."""

    def __init__(self, message: str, signature: str | None = None):
        super().__init__(message)
        self.signature = signature

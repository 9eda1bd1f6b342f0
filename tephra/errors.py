class TephraError(ValueError):
    """
    Base class for errors raised while preparing a Redis client.
    """


class ParseError(TephraError):
    """The Redis URL is malformed or names no host."""


class ConfigError(TephraError):
    """A CA file or client certificate/key pair was supplied but could not be loaded."""

from typing import Optional

import redis

from tephra.endpoint import Endpoint, resolve
from tephra.errors import ConfigError, ParseError, TephraError
from tephra.options import Options
from tephra.registry import ClientRegistry, default_registry
from tephra.settings import Settings, configure
from tephra.transport import TCPDialer, TLSDialer, build_dialer


__all__ = [
    "ClientRegistry",
    "ConfigError",
    "Endpoint",
    "Options",
    "ParseError",
    "TCPDialer",
    "TLSDialer",
    "Tephra",
    "TephraError",
    "build_dialer",
    "get_client",
    "resolve",
]
__version__ = "0.1.0"


class Tephra(Settings):
    """**The Tephra API.**

    Tephra hands out `redis.Redis` clients for `redis://` and `rediss://`
    URLs, taking care of TLS details like custom CAs and client certificates.

    One client is kept per `host:port`, so asking twice for the same server
    returns the same pooled client.
    """

    def __init__(self, registry: Optional[ClientRegistry] = None):
        self.registry = registry if registry is not None else default_registry

    @configure
    def get_client(self, options: Optional[Options] = None, **kwargs) -> redis.Redis:
        """Get the Redis client for the given options.

        Either pass an `Options` or its fields as keyword arguments. Keyword
        arguments are layered over the configured settings.
        """
        if options is None:
            options = Options.from_kwargs(**{**self.defaults(), **kwargs})
        elif kwargs:
            raise ValueError("pass either `options` or keyword arguments, not both")
        return self.registry.get_client(options)


def get_client(options: Optional[Options] = None, **kwargs) -> redis.Redis:
    """Get a Redis client from the process-wide registry."""
    return Tephra().get_client(options, **kwargs)

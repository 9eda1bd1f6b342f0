"""
Memoize one Redis client per `host:port`.

The first options seen for an endpoint win: later calls for the same
`host:port` get the existing client back even if their database, credentials
or TLS settings differ. A warning is logged when that happens.

Clients are never removed or closed here; they live until the process exits.
"""
import threading
from typing import Callable, Dict, List, Tuple

import redis
import structlog as logging

from tephra.client import make_client
from tephra.endpoint import Endpoint, resolve
from tephra.options import Options
from tephra.transport import Dialer, build_dialer


_LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[Endpoint, Options, Dialer], redis.Redis]


class ClientRegistry:
    """A map of `host:port` to Redis client, safe to share across threads.

    Parameters
    ----------
    client_factory : ClientFactory, optional
        Builds a client from the resolved endpoint, the defaulted options and
        the dial function. Defaults to `tephra.client.make_client`.
    """

    def __init__(self, client_factory: ClientFactory = make_client):
        self.client_factory = client_factory
        self._clients: Dict[str, redis.Redis] = {}
        self._options: Dict[str, Options] = {}
        self._lock = threading.Lock()

    def get_client(self, options: Options) -> redis.Redis:
        """Get a client for `options`, reusing the one already built for its `host:port`.

        Raises
        ------
        ParseError
            The URL is malformed or has no host.
        ConfigError
            A CA file or client certificate/key pair could not be loaded.
        """
        client, _ = self.get_or_create(options)
        return client

    def get_or_create(self, options: Options) -> Tuple[redis.Redis, bool]:
        """
        Same as `get_client`, also reporting whether this call built the client.
        """
        endpoint = resolve(options.url)
        key = endpoint.host_port

        with self._lock:
            client = self._clients.get(key)
            if client is not None:
                _LOGGER.debug("reusing redis client", host=key)
                if self._options[key] != options:
                    _LOGGER.warning("options differ from the ones this client was built with, ignoring", host=key)
                return client, False

            # Build under the lock so concurrent callers never construct a second client.
            defaulted = options.with_defaults()
            if not options.pool_size:
                _LOGGER.debug("defaulted pool size", pool_size=defaulted.pool_size)
            dialer = build_dialer(endpoint, defaulted)
            client = self.client_factory(endpoint, defaulted, dialer)
            self._clients[key] = client
            self._options[key] = options

        _LOGGER.info("created redis client", host=key, db=endpoint.db, tls=endpoint.use_tls)
        return client, True

    def hosts(self) -> List[str]:
        with self._lock:
            return list(self._clients)

    def __contains__(self, host_port: str) -> bool:
        with self._lock:
            return host_port in self._clients

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)


default_registry = ClientRegistry()

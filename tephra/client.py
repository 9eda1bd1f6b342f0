"""
Hand a dial function to redis-py.

redis-py owns the pool, the protocol and reconnection. The only thing swapped
out is where a connection's socket comes from.
"""
from typing import Any, Dict

import redis
from redis.connection import Connection

from tephra.endpoint import Endpoint
from tephra.options import Options, check_client_options
from tephra.transport import Dialer


class DialerConnection(Connection):
    """
    A redis-py connection whose socket is produced by a dial function.

    `host` and `port` are kept for redis-py's reprs and error messages.
    """

    def __init__(self, dialer: Dialer, **kwargs):
        self.dialer = dialer
        super().__init__(**kwargs)

    def _connect(self):
        sock = self.dialer()
        sock.settimeout(self.socket_timeout)
        return sock


def connection_kwargs(endpoint: Endpoint, options: Options, dialer: Dialer) -> Dict[str, Any]:
    """Collect the keyword arguments each pooled `DialerConnection` is built with."""
    check_client_options(options.client_options)
    kwargs = dict(options.client_options)
    kwargs.update(
        dialer=dialer,
        host=endpoint.host,
        port=endpoint.port,
        db=endpoint.db,
        password=endpoint.password,
    )
    if options.send_username and endpoint.username:
        kwargs["username"] = endpoint.username
    return kwargs


def make_client(endpoint: Endpoint, options: Options, dialer: Dialer) -> redis.Redis:
    """Construct a Redis client whose pooled connections dial through `dialer`.

    Parameters
    ----------
    endpoint : Endpoint
        Supplies the database index and credentials.
    options : Options
        Supplies the pool size, pool timeout and pass-through options.
        Defaults are expected to have been applied already.
    dialer : Dialer
        Called by the pool whenever it needs a new socket.
    """
    kwargs = connection_kwargs(endpoint, options, dialer)
    kwargs.update(connection_class=DialerConnection, max_connections=options.pool_size)
    if options.pool_timeout:
        kwargs["timeout"] = options.pool_timeout
    pool = redis.BlockingConnectionPool(**kwargs)
    return redis.Redis(connection_pool=pool)

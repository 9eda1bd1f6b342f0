"""
Key value access to Redis through the shared Tephra clients.
"""
from typing import Any, Optional

import tephra
import tephra.common.kv as KV


# kv interface


def connect(*args, **kwargs) -> KV.Client:
    """Connect to a Redis server.

    Parameters
    ----------
    url : str, optional
        The server URL (e.g. rediss://:secret@redis.service.consul:6380/1).
        Defaults to the configured settings or `REDIS_URL`.
    ca_file : str, optional
        PEM CA certificate used to verify the server.
    client_cert_file, client_key_file : str, optional
        PEM client certificate and key, used only when both are given.

    Any other keyword argument is passed to `tephra.Options`.
    """
    raw_client = tephra.get_client(**kwargs)

    # Make convenience bindings for the client.
    client = KV.Client(raw_client, name="redis")
    for sym in KV.Symbols:
        setattr(client, sym, globals()[sym].__get__(client))
    return client


def kv_get(client: KV.Client, name: str, **kwargs) -> Optional[bytes]:
    return client.raw_client.get(name)


def kv_set(client: KV.Client, name, value: str, **kwargs) -> Optional[Any]:
    """
    Mirror the functionality of the raw clients' set method and return the
    client itself.
    """
    client.raw_client.set(name, value, **kwargs)
    return client


def kv_pop(client: KV.Client, name: str, *args, **kwargs) -> Optional[Any]:
    return client.raw_client.delete(name)

from collections.abc import Mapping as MappingABC
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional, Type


DEFAULT_DIAL_TIMEOUT = 30.0
DEFAULT_POOL_SIZE = 3

# redis-py connection options that only affect how its own socket is opened.
# The dialer opens the socket, so `dial_timeout` and `tcp_keepalive` replace them.
DIALER_OPTIONS = frozenset(
    ["socket_connect_timeout", "socket_keepalive", "socket_keepalive_options", "socket_type"]
)


class Options(NamedTuple):
    """Options for configuring connectivity to Redis.

    Parameters
    ----------
    url : str
        The Redis instance's URL in the form `redis[s]://[user:pass@]host:port[/db]`.
    ca_file : Optional[str]
        Path to a PEM-encoded certificate for the CA that signs the Redis
        server certificate. If not supplied, only the system default trusted
        roots are used.
    client_key_file : Optional[str]
        Path to a PEM-encoded private key the client authenticates with.
        Ignored unless `client_cert_file` is also supplied.
    client_cert_file : Optional[str]
        Path to a PEM-encoded certificate the client authenticates with.
        Ignored unless `client_key_file` is also supplied.
    dial_timeout : float
        Seconds to wait for a TCP connection. Defaults to 30 when 0.
    tcp_keepalive : float
        TCP keepalive period in seconds. Keepalives are disabled when 0.
    pool_size : int
        Maximum number of pooled connections. Defaults to 3 when 0.
    pool_timeout : float
        Seconds to wait for a free pooled connection. The pool's own default
        is used when 0.
    send_username : bool
        Send the URL's username along with the password (Redis ACLs).
    client_options : Mapping[str, Any]
        Passed through unchanged to the redis-py connection class. Options in
        `DIALER_OPTIONS` are rejected since the dialer opens the socket; use
        `dial_timeout` and `tcp_keepalive` instead.
    """

    url: str
    ca_file: Optional[str] = None
    client_key_file: Optional[str] = None
    client_cert_file: Optional[str] = None
    dial_timeout: float = 0
    tcp_keepalive: float = 0
    pool_size: int = 0
    pool_timeout: float = 0
    send_username: bool = False
    client_options: Mapping[str, Any] = MappingProxyType({})

    @classmethod
    def from_kwargs(cls, **kwargs) -> "Options":
        """
        Build options from keyword arguments.

        Unrecognised keywords are treated as `client_options`.
        """
        kwargs = dict(kwargs)
        client_options = dict(_kw_get("client_options", MappingABC, kwargs, default={}))
        known = {}
        for key in cls._fields:
            if key not in kwargs or key == "client_options":
                continue
            known[key] = _kw_get(key, _FIELD_TYPES[key], kwargs)
            if known[key] is None and key != "url":
                del known[key]
        if "url" not in known:
            raise ValueError(f"keyword argument `url: {str}` must be provided")
        for key, value in kwargs.items():
            if key not in cls._fields:
                client_options[key] = value
        check_client_options(client_options)
        return cls(client_options=MappingProxyType(client_options), **known)

    def with_defaults(self) -> "Options":
        """Return a copy with the zero-value defaults filled in."""
        changes = {}
        if not self.dial_timeout:
            changes["dial_timeout"] = DEFAULT_DIAL_TIMEOUT
        if not self.pool_size:
            changes["pool_size"] = DEFAULT_POOL_SIZE
        return self._replace(**changes) if changes else self


_FIELD_TYPES: Dict[str, Any] = {
    "url": str,
    "ca_file": (str, type(None)),
    "client_key_file": (str, type(None)),
    "client_cert_file": (str, type(None)),
    "dial_timeout": (int, float),
    "tcp_keepalive": (int, float),
    "pool_size": int,
    "pool_timeout": (int, float),
    "send_username": bool,
}


def check_client_options(client_options: Mapping[str, Any]):
    """Reject pass-through options the dialer would silently override."""
    unsupported = sorted(DIALER_OPTIONS.intersection(client_options))
    if unsupported:
        raise ValueError(f"client options {unsupported} are not supported, use `dial_timeout` and `tcp_keepalive`")


def _kw_get(key: str, kw_type: Type, kwargs, **_kwargs) -> Any:
    if key in kwargs:
        value = kwargs[key]
        if not isinstance(value, kw_type) or (isinstance(value, bool) and kw_type is not bool):
            raise ValueError(f"expected keyword argument `{key}: {kw_type}`, " f"instead got `{key}: {type(value)}`")
        return value
    elif "default" in _kwargs:
        return _kwargs["default"]
    else:
        raise ValueError(f"keyword argument `{key}: {kw_type}` must be provided")

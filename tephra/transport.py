"""
Build the dial functions that hand redis-py its sockets.

A dialer is a zero-argument callable returning a connected socket. Plain
endpoints get a `TCPDialer`. Encrypted endpoints get a `TLSDialer`, which
dials through a `TCPDialer` and then performs the TLS handshake.

Nothing here touches the network until a dialer is called.
"""
from collections import OrderedDict
import socket
import ssl
import threading
from typing import Callable, Optional, Tuple, Union

import structlog as logging

from tephra.endpoint import Endpoint
from tephra.errors import ConfigError
from tephra.options import DEFAULT_DIAL_TIMEOUT, Options


_LOGGER = logging.getLogger(__name__)

SESSION_CACHE_SIZE = 1000

Dialer = Callable[[], socket.socket]


class TCPDialer:
    """Dial a TCP connection with a connect timeout and optional keepalives.

    Parameters
    ----------
    host : str
    port : int
    timeout : float
        Seconds to wait for the connection to be established.
    keepalive : float
        Keepalive period in seconds. Keepalives are disabled when 0.
    """

    def __init__(self, host: str, port: int, timeout: float = DEFAULT_DIAL_TIMEOUT, keepalive: float = 0):
        self.host = host
        self.port = port
        self.timeout = timeout or DEFAULT_DIAL_TIMEOUT
        self.keepalive = keepalive

    def __call__(self) -> socket.socket:
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            if self.keepalive:
                _enable_keepalive(sock, self.keepalive)
        except OSError:
            sock.close()
            raise
        return sock

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.host}:{self.port} timeout={self.timeout} keepalive={self.keepalive}>"


def _enable_keepalive(sock: socket.socket, period: float):
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    seconds = max(1, int(period))
    if hasattr(socket, "TCP_KEEPIDLE"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, seconds)
    elif hasattr(socket, "TCP_KEEPALIVE"):
        # macOS spells TCP_KEEPIDLE differently.
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPALIVE, seconds)
    if hasattr(socket, "TCP_KEEPINTVL"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, seconds)


class SessionCache:
    """
    A bounded LRU cache of TLS sessions, keyed by server address.

    Resuming a session on reconnect skips the full handshake.
    """

    def __init__(self, capacity: int = SESSION_CACHE_SIZE):
        self.capacity = capacity
        self._sessions = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ssl.SSLSession]:
        with self._lock:
            session = self._sessions.get(key)
            if session is not None:
                self._sessions.move_to_end(key)
            return session

    def put(self, key: str, session: Optional[ssl.SSLSession]):
        if session is None:
            return
        with self._lock:
            self._sessions[key] = session
            self._sessions.move_to_end(key)
            while len(self._sessions) > self.capacity:
                self._sessions.popitem(last=False)

    def __len__(self) -> int:
        return len(self._sessions)


class TLSDialer:
    """Dial through a `TCPDialer` and wrap the socket in TLS.

    Attributes
    ----------
    context : ssl.SSLContext
    ca_file : Optional[str]
        The file the trust roots were loaded from, or None for system defaults.
    client_identity : Optional[Tuple[str, str]]
        The `(cert_file, key_file)` pair presented to the server, if any.
    sessions : SessionCache
    """

    def __init__(
        self,
        tcp: TCPDialer,
        context: ssl.SSLContext,
        ca_file: Optional[str] = None,
        client_identity: Optional[Tuple[str, str]] = None,
        sessions: Optional[SessionCache] = None,
    ):
        self.tcp = tcp
        self.context = context
        self.ca_file = ca_file
        self.client_identity = client_identity
        self.sessions = sessions if sessions is not None else SessionCache()

    @property
    def server_name(self) -> str:
        return self.tcp.host

    def __call__(self) -> ssl.SSLSocket:
        key = f"{self.tcp.host}:{self.tcp.port}"
        sock = self.tcp()
        try:
            tls_sock = self.context.wrap_socket(sock, server_hostname=self.server_name, session=self.sessions.get(key))
        except OSError:
            sock.close()
            raise
        self.sessions.put(key, tls_sock.session)
        return tls_sock

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.tcp.host}:{self.tcp.port} ca_file={self.ca_file!r}>"


def load_ca(context: ssl.SSLContext, ca_file: str):
    """
    Make the PEM certificate(s) in `ca_file` the trust roots of `context`.
    """
    try:
        context.load_verify_locations(cafile=ca_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"Unable to load Redis CA file {ca_file}: {e}") from e


def load_client_identity(context: ssl.SSLContext, cert_file: str, key_file: str):
    try:
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)
    except (OSError, ssl.SSLError) as e:
        raise ConfigError(f"Unable to load client certificate/key pair {cert_file}, {key_file}: {e}") from e


def make_tls_context(options: Options) -> Tuple[ssl.SSLContext, Optional[Tuple[str, str]]]:
    """Build the client-side SSL context described by `options`.

    Returns
    -------
    Tuple[ssl.SSLContext, Optional[Tuple[str, str]]]
        The context and the client certificate/key pair loaded into it, if any.

    Raises
    ------
    ConfigError
        A CA file or client pair was supplied but could not be loaded.
    """
    if not options.ca_file:
        _LOGGER.debug("not using custom redis CA")
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    else:
        _LOGGER.debug("adding custom redis CA", ca_file=options.ca_file)
        # A bare context starts with no trust roots, so the CA file is the only one.
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        load_ca(context, options.ca_file)

    identity = None
    if not options.client_key_file or not options.client_cert_file:
        _LOGGER.debug("not enabling client TLS authentication")
    else:
        _LOGGER.debug(
            "enabling client TLS authentication",
            key_file=options.client_key_file,
            cert_file=options.client_cert_file,
        )
        load_client_identity(context, options.client_cert_file, options.client_key_file)
        identity = (options.client_cert_file, options.client_key_file)
    return context, identity


def build_dialer(endpoint: Endpoint, options: Options) -> Union[TCPDialer, TLSDialer]:
    """Build the dial function for `endpoint`.

    Parameters
    ----------
    endpoint : Endpoint
        The resolved Redis endpoint.
    options : Options
        Supplies the dial timeout, keepalive and certificate files.

    Raises
    ------
    ConfigError
        A CA file or client pair was supplied but could not be loaded.
    """
    timeout = options.dial_timeout
    if not timeout:
        timeout = DEFAULT_DIAL_TIMEOUT
        _LOGGER.debug("defaulted dial timeout", timeout=timeout)
    tcp = TCPDialer(endpoint.host, endpoint.port, timeout=timeout, keepalive=options.tcp_keepalive)
    if not endpoint.use_tls:
        return tcp

    _LOGGER.debug("using encrypted connection to redis", host=endpoint.host_port)
    context, identity = make_tls_context(options)
    return TLSDialer(tcp, context, ca_file=options.ca_file or None, client_identity=identity)

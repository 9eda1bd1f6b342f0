from contextlib import suppress
import socket
import ssl
import threading

import pytest

from tephra.settings import Settings
from tests import CA_FILE, GREETING, SERVER_CERT_FILE, SERVER_KEY_FILE


class LoopbackServer:
    """
    Accept connections on 127.0.0.1, optionally over TLS, greet each one and
    record what the client presented.
    """

    def __init__(self, context=None):
        self.context = context
        self.listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.listener.bind(("127.0.0.1", 0))
        self.listener.listen(8)
        self.port = self.listener.getsockname()[1]
        self.peer_certs = []
        self.errors = []
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while True:
            try:
                conn, _ = self.listener.accept()
            except OSError:
                return
            conn.settimeout(5)
            try:
                if self.context is not None:
                    conn = self.context.wrap_socket(conn, server_side=True)
                    self.peer_certs.append(conn.getpeercert())
                conn.sendall(GREETING)
                with suppress(OSError):
                    conn.recv(1)
            except OSError as e:
                self.errors.append(e)
            finally:
                conn.close()

    def close(self):
        self.listener.close()
        self._thread.join(timeout=5)


@pytest.fixture
def tcp_server():
    server = LoopbackServer()
    yield server
    server.close()


@pytest.fixture
def tls_server():
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=SERVER_CERT_FILE, keyfile=SERVER_KEY_FILE)
    context.load_verify_locations(cafile=CA_FILE)
    context.verify_mode = ssl.CERT_OPTIONAL
    server = LoopbackServer(context)
    yield server
    server.close()


@pytest.fixture(autouse=True)
def reset_settings():
    Settings().reset()
    yield
    Settings().reset()

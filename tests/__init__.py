import os


_BACKENDS = []

FIXTURES = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")
CA_FILE = os.path.join(FIXTURES, "ca.pem")
SERVER_CERT_FILE = os.path.join(FIXTURES, "server.pem")
SERVER_KEY_FILE = os.path.join(FIXTURES, "server.key")
CLIENT_CERT_FILE = os.path.join(FIXTURES, "client.pem")
CLIENT_KEY_FILE = os.path.join(FIXTURES, "client.key")
GARBAGE_FILE = os.path.join(FIXTURES, "garbage.pem")
MISSING_FILE = os.path.join(FIXTURES, "does-not-exist.pem")

GREETING = b"+OK\r\n"


def _get_backends():
    global _BACKENDS
    _BACKENDS.extend([backend.lower() for backend in os.getenv("TEST_BACKENDS", "").split(" ") if backend])
    if not _BACKENDS:
        _BACKENDS = ["all"]


def should_skip(backend):
    """Determine whether a test should be skipped or not.

    If the environment variable `TEST_BACKENDS` is unset or set to "all", all
    tests should be run.

    Otherwise, if a module's shortname is not in the space separated list,
    it should not be run.

    e.g.

    TEST_BACKENDS="all"

    TEST_BACKENDS="redis"

    TEST_BACKENDS="none"
    """
    if not _BACKENDS:
        _get_backends()
    if "all" in _BACKENDS:
        return False
    return backend.lower() not in _BACKENDS

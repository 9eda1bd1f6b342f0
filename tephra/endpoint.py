"""
Resolve a Redis URL into the pieces needed to dial and authenticate.

    redis[s]://[user:pass@]host:port[/db]
"""
import posixpath
from typing import NamedTuple, Optional
from urllib.parse import unquote, urlsplit

import structlog as logging

from tephra.errors import ParseError


_LOGGER = logging.getLogger(__name__)

DEFAULT_PORT = 6379
TLS_SCHEME = "rediss"
URL_FORM = "redis[s]://[user:pass@]host:port[/db]"
# Longer suffixes cannot name a real database and may exceed int() limits.
MAX_DB_DIGITS = 10


class Endpoint(NamedTuple):
    host: str
    port: int
    use_tls: bool = False
    db: int = 0
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def host_port(self) -> str:
        """The dial target, also used as the registry key."""
        if ":" in self.host:
            # IPv6 literals keep their brackets.
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def resolve(url: str) -> Endpoint:
    """Parse a Redis URL.

    Parameters
    ----------
    url : str
        A URL of the form `redis[s]://[user:pass@]host:port[/db]`.

    Raises
    ------
    ParseError
        The URL could not be parsed or has no host.
    """
    if not isinstance(url, str):
        raise ParseError(f"Unable to parse Redis address: expected a str, got {type(url)}")
    try:
        parts = urlsplit(url)
        host = parts.hostname
        port = parts.port
    except ValueError as e:
        raise ParseError(f"Unable to parse Redis address: {e}") from e

    if not host:
        raise ParseError(f"Please provide a Redis URL of the form '{URL_FORM}'")

    db = _parse_db(parts.path)
    endpoint = Endpoint(
        host=host,
        port=port if port is not None else DEFAULT_PORT,
        use_tls=parts.scheme.lower() == TLS_SCHEME,
        db=db,
        username=unquote(parts.username) if parts.username else None,
        password=unquote(parts.password) if parts.password is not None else None,
    )
    _LOGGER.debug("resolved redis endpoint", host=endpoint.host_port, db=db, tls=endpoint.use_tls)
    return endpoint


def _parse_db(path: str) -> int:
    """
    Take the database number from the last path segment.

    A segment that is not a non-negative integer falls back to database 0.
    """
    if not path:
        return 0
    _, segment = posixpath.split(path)
    if segment.isdecimal() and len(segment) <= MAX_DB_DIGITS:
        return int(segment)
    if segment:
        _LOGGER.warning("unable to get database number from path, using 0", path=path)
    return 0

"""The live connection for one engine."""

from dataclasses import dataclass, field
from typing import Any

from ..models import EngineKind


@dataclass(frozen=True)
class ConnectionHandle:
    """A tagged union over the four engine connections.

    ``kind`` selects the variant:

    - ``MYSQL``: ``pool`` is an ``aiomysql.Pool``
    - ``POSTGRESQL``: ``pool`` is an ``asyncpg.Pool``
    - ``SQLITE``: ``pool`` is a ``ConnectionPool`` of aiosqlite connections
    - ``MONGODB``: ``pool`` is a ``pymongo.AsyncMongoClient`` and
      ``database`` the ``AsyncDatabase`` queries run against

    Handles wrap pools, not sockets: copies share the same pool and can be
    used concurrently.
    """

    kind: EngineKind
    pool: Any
    database: Any = None
    dsn: str = field(default="", compare=False)  # credential-free, for logging

    def __repr__(self) -> str:
        return f"ConnectionHandle(kind={self.kind.value!r}, dsn={self.dsn!r})"

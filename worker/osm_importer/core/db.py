"""PostgreSQL record store for imported places."""

import enum
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import psycopg2
from psycopg2 import errors, extras, pool

from osm_importer.models import NormalizedRecord

logger = logging.getLogger(__name__)

STATEMENT_TIMEOUT_MS = 10000
CONNECT_TIMEOUT = 10


class InsertStatus(enum.Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class InsertOutcome:
    status: InsertStatus
    reason: Optional[str] = None

    @classmethod
    def inserted(cls) -> "InsertOutcome":
        return cls(InsertStatus.INSERTED)

    @classmethod
    def duplicate(cls) -> "InsertOutcome":
        return cls(InsertStatus.DUPLICATE)

    @classmethod
    def failed(cls, reason: str) -> "InsertOutcome":
        return cls(InsertStatus.FAILED, reason)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS places (
    id BIGSERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    latitude DOUBLE PRECISION NOT NULL,
    longitude DOUBLE PRECISION NOT NULL,
    address TEXT NOT NULL,
    phone TEXT,
    website TEXT,
    source TEXT NOT NULL,
    coordinates_verified BOOLEAN NOT NULL DEFAULT TRUE,
    coordinate_source TEXT,
    raw JSONB,
    added_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE UNIQUE INDEX IF NOT EXISTS places_dedup_key ON places (latitude, longitude, name);
CREATE INDEX IF NOT EXISTS places_added_at ON places (added_at DESC);
"""

_EXISTS = """
SELECT 1 FROM places
WHERE latitude = %(latitude)s AND longitude = %(longitude)s AND name = %(name)s
LIMIT 1;
"""

_INSERT = """
INSERT INTO places (
    name,
    category,
    latitude,
    longitude,
    address,
    phone,
    website,
    source,
    coordinates_verified,
    coordinate_source,
    raw,
    added_at
) VALUES (
    %(name)s,
    %(category)s,
    %(latitude)s,
    %(longitude)s,
    %(address)s,
    %(phone)s,
    %(website)s,
    %(source)s,
    %(coordinates_verified)s,
    %(coordinate_source)s,
    %(raw)s,
    %(added_at)s
);
"""

_RECENT = """
SELECT name, category, latitude, longitude, address, phone, website,
       source, coordinates_verified, coordinate_source, added_at
FROM places
ORDER BY added_at DESC
LIMIT %(limit)s;
"""


def _prepare_params(record: NormalizedRecord) -> Dict[str, Any]:
    return {
        "name": record.name,
        "category": record.category,
        "latitude": record.latitude,
        "longitude": record.longitude,
        "address": record.address,
        "phone": record.phone,
        "website": record.website,
        "source": record.source,
        "coordinates_verified": record.coordinates_verified,
        "coordinate_source": record.coordinate_source,
        "raw": extras.Json(record.raw_snapshot or {}),
        "added_at": record.added_at,
    }


def _row_to_record(row: Dict[str, Any]) -> NormalizedRecord:
    return NormalizedRecord(
        name=row["name"],
        category=row["category"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        address=row["address"],
        phone=row.get("phone"),
        website=row.get("website"),
        source=row["source"],
        coordinates_verified=row["coordinates_verified"],
        coordinate_source=row["coordinate_source"],
        added_at=row["added_at"],
    )


class PostgresStore:
    """Deduplicating writer plus the read path behind ``/api/recent``.

    The pool is thread-safe and shared by the import loop and HTTP handlers.
    """

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 5) -> None:
        if not dsn:
            raise RuntimeError("DATABASE_URL is required for database connections")
        self._dsn = dsn
        self._minconn = minconn
        self._maxconn = maxconn
        self._pool: Optional[pool.ThreadedConnectionPool] = None

    def init_pool(self) -> pool.ThreadedConnectionPool:
        """Initialise and return the shared connection pool."""
        if self._pool is None:
            self._pool = pool.ThreadedConnectionPool(
                self._minconn,
                self._maxconn,
                dsn=self._dsn,
                connect_timeout=CONNECT_TIMEOUT,
                options=f"-c statement_timeout={STATEMENT_TIMEOUT_MS}",
            )
            logger.info("Database connection pool initialised")
        return self._pool

    @contextmanager
    def get_connection(self):
        """Context manager yielding a pooled connection.

        Connections that were closed underneath us are dropped from the pool.
        """
        pg_pool = self.init_pool()
        conn = pg_pool.getconn()
        try:
            yield conn
        except Exception:
            if not conn.closed:
                conn.rollback()
            raise
        finally:
            pg_pool.putconn(conn, close=bool(conn.closed))

    def ensure_schema(self) -> None:
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_SCHEMA)
            conn.commit()
        logger.info("Ensured places schema")

    def exists_by_key(self, latitude: float, longitude: float, name: str) -> bool:
        with self.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_EXISTS, {"latitude": latitude, "longitude": longitude, "name": name})
                found = cur.fetchone() is not None
            conn.rollback()
        return found

    def insert(self, record: NormalizedRecord) -> InsertOutcome:
        """Insert one record; never raises for database errors."""
        params = _prepare_params(record)
        try:
            with self.get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(_INSERT, params)
                conn.commit()
        except errors.UniqueViolation:
            logger.debug("Duplicate place skipped: %s", record.name)
            return InsertOutcome.duplicate()
        except psycopg2.Error as exc:
            logger.error("Failed to insert %s: %s", record.name, exc)
            return InsertOutcome.failed(str(exc).strip() or exc.__class__.__name__)
        logger.debug("Inserted place %s", record.name)
        return InsertOutcome.inserted()

    def fetch_recent(self, limit: int = 100) -> List[NormalizedRecord]:
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute(_RECENT, {"limit": limit})
                rows = cur.fetchall()
            conn.rollback()
        return [_row_to_record(row) for row in rows]

    def close(self) -> None:
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed")

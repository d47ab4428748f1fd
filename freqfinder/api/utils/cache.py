"""
Versioned cache of master lookup results.

One logical table keyed by ``search_key`` holds the master record for a
location (all categories), the grounding sources it was built from and the
time it was last written. Payloads carry ``schemaVersion``; older payloads
are migrated on read, unrecoverable ones are treated as a miss.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import requests

from ..models import ScanResult, Source, TripResult
from .text import compact_key, sanitize_location

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Backend failures that degrade to a miss or a skipped write.
BACKEND_ERRORS = (OSError, ValueError, requests.RequestException)


@dataclass
class CacheEntry:
    key: str
    payload: Dict
    grounding_chunks: List[Dict] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def to_row(self) -> Dict:
        return {
            'search_key': self.key,
            'result_data': self.payload,
            'grounding_chunks': self.grounding_chunks,
            'updated_at': (self.updated_at or datetime.now(timezone.utc)).isoformat(),
        }

    @classmethod
    def from_row(cls, row: Dict) -> "CacheEntry":
        payload = row.get('result_data')
        grounding = row.get('grounding_chunks')
        return cls(
            key=row.get('search_key', ""),
            payload=payload if isinstance(payload, dict) else {},
            grounding_chunks=grounding if isinstance(grounding, list) else [],
            updated_at=parse_timestamp(row.get('updated_at')),
        )


def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _scan_payloads(payload: Dict) -> List[Dict]:
    """Every ScanResult-shaped dict inside a location or trip payload."""
    if isinstance(payload.get('locations'), list):
        return [
            loc['data'] for loc in payload['locations']
            if isinstance(loc, dict) and isinstance(loc.get('data'), dict)
        ]
    return [payload]


def has_current_shape(payload: Dict) -> bool:
    """False when a trunked system predates per-system frequency lists."""
    for scan in _scan_payloads(payload):
        systems = scan.get('trunkedSystems')
        if not isinstance(systems, list):
            continue
        for system in systems:
            if isinstance(system, dict) and 'frequencies' not in system:
                return False
    return True


def _migrate_v0(payload: Dict) -> Optional[Dict]:
    """Unversioned payloads are usable as long as their systems have frequencies."""
    if not has_current_shape(payload):
        return None
    return {**payload, 'schemaVersion': 1}


# from-version -> function returning the next version, or None when the
# payload cannot be carried forward.
MIGRATIONS: Dict[int, Callable[[Dict], Optional[Dict]]] = {
    0: _migrate_v0,
}


def migrate(payload: Dict) -> Optional[Dict]:
    """Bring a payload up to ``SCHEMA_VERSION``; ``None`` when it cannot be."""
    try:
        version = int(payload.get('schemaVersion') or 0)
    except (TypeError, ValueError):
        return None

    if version > SCHEMA_VERSION:
        return None

    while version < SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            return None
        payload = step(payload)
        if payload is None:
            return None
        version += 1

    return payload if has_current_shape(payload) else None


class CacheBackend:
    """Storage for cache rows. Implementations may raise ``BACKEND_ERRORS``."""

    def get(self, key: str) -> Optional[CacheEntry]:
        raise NotImplementedError

    def put(self, entry: CacheEntry) -> None:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError


class NullCacheBackend(CacheBackend):
    """Caching disabled."""

    def get(self, key: str) -> Optional[CacheEntry]:
        return None

    def put(self, entry: CacheEntry) -> None:
        pass

    def count(self) -> int:
        return 0


class FileCacheBackend(CacheBackend):
    """One JSON file per key under ``cache_dir``."""

    def __init__(self, cache_dir: str = ".ff_cache"):
        self.cache_dir = cache_dir
        if not os.path.exists(cache_dir):
            os.makedirs(cache_dir)

    def _get_path(self, key: str) -> str:
        safe = re.sub(r"[^A-Za-z0-9_.,-]", "_", key)
        return os.path.join(self.cache_dir, f"{safe}.json")

    def get(self, key: str) -> Optional[CacheEntry]:
        path = self._get_path(key)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return CacheEntry.from_row(json.load(f))

    def put(self, entry: CacheEntry) -> None:
        path = self._get_path(entry.key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(entry.to_row(), f)
        os.replace(tmp_path, path)

    def count(self) -> int:
        return sum(1 for name in os.listdir(self.cache_dir) if name.endswith(".json"))


class SupabaseCacheBackend(CacheBackend):
    """The cache table behind a Supabase (PostgREST) endpoint."""

    def __init__(self, url: str, key: str, table: str = "search_cache", timeout: float = 10, session: Optional[requests.Session] = None):
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        })

    def get(self, key: str) -> Optional[CacheEntry]:
        response = self._session.get(
            self.endpoint,
            params={
                'search_key': f"eq.{key}",
                'select': "search_key,result_data,grounding_chunks,updated_at",
                'limit': 1,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        rows = response.json()
        if not rows:
            return None
        return CacheEntry.from_row(rows[0])

    def put(self, entry: CacheEntry) -> None:
        response = self._session.post(
            self.endpoint,
            params={'on_conflict': "search_key"},
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            data=json.dumps(entry.to_row()),
            timeout=self.timeout,
        )
        response.raise_for_status()

    def count(self) -> int:
        response = self._session.get(
            self.endpoint,
            params={'select': "search_key", 'limit': 1},
            headers={"Prefer": "count=exact"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        # Content-Range: 0-0/42
        total = response.headers.get("Content-Range", "").rpartition("/")[2]
        return int(total) if total.isdigit() else 0


class CacheStore:
    """
    Reads and writes master records.

    Backend errors never fail a lookup: a failed read is a miss, a failed
    write is skipped.
    """

    def __init__(self, backend: Optional[CacheBackend] = None):
        self.backend = backend or NullCacheBackend()

    @staticmethod
    def location_key(location: str) -> str:
        return f"loc_{compact_key(sanitize_location(location))}"

    @staticmethod
    def trip_key(start: str, end: str) -> str:
        return f"trip_{compact_key(sanitize_location(start))}_to_{compact_key(sanitize_location(end))}"

    def _load(self, key: str) -> Optional[CacheEntry]:
        try:
            entry = self.backend.get(key)
        except BACKEND_ERRORS as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None
        if entry is None:
            logger.debug(f"Cache miss: {key}")
            return None

        payload = migrate(entry.payload)
        if payload is None:
            logger.info(f"Stale cache entry ignored: {key}")
            return None
        entry.payload = payload
        return entry

    def read(self, key: str, has_credentials: bool = False, enforce_quality: bool = True) -> Optional[ScanResult]:
        """
        Read a location result.

        An entry without agencies or systems is a miss. An AI-sourced entry
        is a miss when the caller holds database credentials, so a better
        answer gets fetched. Served entries are marked ``Cache`` unless they
        came from the database.
        """
        entry = self._load(key)
        if entry is None:
            return None

        result = ScanResult.from_dict(entry.payload)
        if result.is_empty():
            logger.info(f"Empty cache entry ignored: {key}")
            return None
        if enforce_quality and has_credentials and result.source == Source.AI:
            logger.info(f"Ignoring AI-sourced cache entry {key}, credentials present")
            return None

        if result.source != Source.API:
            result.source = Source.CACHE
        logger.info(f"Cache hit: {key}")
        return result

    def read_trip(self, key: str) -> Optional[TripResult]:
        entry = self._load(key)
        if entry is None:
            return None

        trip = TripResult.from_dict(entry.payload)
        if trip.is_empty():
            logger.info(f"Empty cache entry ignored: {key}")
            return None
        for stop in trip.locations:
            if stop.data.source != Source.API:
                stop.data.source = Source.CACHE
        logger.info(f"Cache hit: {key}")
        return trip

    def write(self, key: str, result, grounding_chunks: Optional[List[Dict]] = None) -> bool:
        """
        Upsert a ``ScanResult`` or ``TripResult``; empty results are never stored.

        Returns:
            True when the entry was written
        """
        if result.is_empty():
            logger.info(f"Not caching empty result for {key}")
            return False

        entry = CacheEntry(
            key=key,
            payload={**result.to_dict(), 'schemaVersion': SCHEMA_VERSION},
            grounding_chunks=list(grounding_chunks or []),
            updated_at=datetime.now(timezone.utc),
        )
        try:
            self.backend.put(entry)
        except BACKEND_ERRORS as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        logger.info(f"Cached {key}")
        return True

    def count(self) -> int:
        try:
            return self.backend.count()
        except BACKEND_ERRORS as e:
            logger.warning(f"Cache count failed: {e}")
            return 0

    def is_fresh(self, key: str, max_age: timedelta) -> bool:
        """Whether a usable entry exists and was written within ``max_age``."""
        entry = self._load(key)
        if entry is None or entry.updated_at is None:
            return False
        return datetime.now(timezone.utc) - entry.updated_at <= max_age

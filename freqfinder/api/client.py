"""
Main client interface for frequency lookups.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import load_config
from .exceptions import (
    ConfigurationError,
    InvalidQueryError,
    LookupFailedError,
    NotFoundError,
    ParseError,
    TransportError,
)
from .filters import filter_scan_result, filter_trip_result
from .merge import combine
from .models import RegionInfo, RRCredentials, ScanResult, TripLocation, TripResult
from .sources import GeminiOracle, RadioReferenceSource
from .taxonomy import ALL_SERVICES
from .utils.cache import CacheStore, FileCacheBackend, NullCacheBackend, SupabaseCacheBackend
from .utils.pool import fan_out, run_concurrently
from .utils.text import MAX_SERVICES, is_zipcode, sanitize_location

logger = logging.getLogger(__name__)

# Failures that make one source unavailable without failing the lookup.
SOURCE_ERRORS = (TransportError, ParseError)


class FrequencyClient:
    """
    High-level client combining the RadioReference database and Gemini.

    Master records covering every service category are fetched once per
    location, cached, and filtered down to what each caller asked for.
    The database path needs an app key plus per-call account credentials;
    the AI path needs a Gemini API key. Either may be missing.
    """

    def __init__(
        self,
        credentials: Optional[RRCredentials] = None,
        cache: Optional[CacheStore] = None,
        oracle: Optional[GeminiOracle] = None,
        rpc=None,
        **kwargs
    ):
        self.config = load_config(**kwargs)
        self.credentials = credentials
        self._rpc = rpc

        self.cache = cache or CacheStore(self._build_cache_backend())
        self.oracle = oracle
        if self.oracle is None and self.config['gemini_api_key']:
            self.oracle = GeminiOracle(
                api_key=self.config['gemini_api_key'],
                model=self.config['gemini_model'],
                use_search=self.config['use_search_grounding'],
            )

    def _build_cache_backend(self):
        backend = self.config['cache_backend']
        if backend == "supabase":
            if not self.config['supabase_url'] or not self.config['supabase_key']:
                raise ConfigurationError("Supabase cache needs SUPABASE_URL and SUPABASE_KEY")
            return SupabaseCacheBackend(
                self.config['supabase_url'],
                self.config['supabase_key'],
                table=self.config['cache_table'],
            )
        if backend == "file":
            return FileCacheBackend(self.config['cache_dir'])
        if backend == "none":
            return NullCacheBackend()
        raise ConfigurationError(f"Unknown cache backend {backend}")

    def _authoritative(self, credentials: Optional[RRCredentials] = None) -> Optional[RadioReferenceSource]:
        credentials = credentials or self.credentials
        if credentials is None:
            return None
        if not self.config['rr_app_key'] and self._rpc is None:
            return None
        return RadioReferenceSource(
            self.config['rr_app_key'],
            credentials,
            url=self.config['rr_url'],
            timeout=self.config['rpc_timeout'],
            max_workers=self.config['max_workers'],
            max_system_workers=self.config['max_system_workers'],
            max_subcategories=self.config['max_subcategories'],
            max_systems=self.config['max_systems'],
            rpc=self._rpc,
        )

    @staticmethod
    def _services(services: Optional[Iterable[str]]) -> List[str]:
        if services is None:
            return list(ALL_SERVICES)
        return list(services)[:MAX_SERVICES]

    @staticmethod
    def _location(location: str) -> str:
        cleaned = sanitize_location(location)
        if not cleaned:
            raise InvalidQueryError("Location is required")
        return cleaned

    def resolve_location(self, query: str, credentials: Optional[RRCredentials] = None) -> RegionInfo:
        """
        Resolve a ZIP code or free-text place.

        A ZIP is looked up in the database when credentials are available,
        otherwise returned bare. Free text goes through Gemini; when that
        fails the query itself is returned as the name.

        Raises:
            InvalidQueryError: The query is empty
            AuthenticationError: The database rejected the credentials
        """
        query = self._location(query)

        if is_zipcode(query):
            source = self._authoritative(credentials)
            if source is not None:
                try:
                    return source.resolve(query)
                except (NotFoundError, TransportError) as e:
                    logger.warning(f"Database resolution failed for {query}: {e}")
            return RegionInfo(name=f"ZIP {query}", zipcode=query, zips=[query])

        if self.oracle is not None:
            try:
                region = self.oracle.resolve_location(query)
                logger.info(f"Resolved {query!r} -> {region.name} ({region.zipcode})")
                return region
            except SOURCE_ERRORS as e:
                logger.warning(f"Location resolution failed for {query!r}: {e}")

        return RegionInfo(name=query)

    def fetch_authoritative(
        self,
        zipcode: str,
        credentials: Optional[RRCredentials] = None,
        services: Optional[Iterable[str]] = None,
    ) -> ScanResult:
        """
        Fetch database data for a ZIP code, uncached.

        Raises:
            ConfigurationError: No app key or credentials
            InvalidQueryError: The ZIP is malformed
            AuthenticationError: The credentials were rejected
            TransportError: The ZIP or county lookup failed
        """
        source = self._authoritative(credentials)
        if source is None:
            raise ConfigurationError("RadioReference app key and account credentials are required")
        return source.fetch(zipcode, self._services(services))

    def fetch_heuristic(self, location: str, services: Optional[Iterable[str]] = None) -> ScanResult:
        """
        Ask Gemini about a location, uncached.

        Raises:
            ConfigurationError: No Gemini API key
            TransportError: The Gemini call failed
            ParseError: The answer held no JSON
        """
        if self.oracle is None:
            raise ConfigurationError("Gemini API key is required")
        result, _ = self.oracle.search(self._location(location), self._services(services))
        return result

    def _safe_authoritative(self, source: Optional[RadioReferenceSource], zipcode: Optional[str]) -> Optional[ScanResult]:
        if source is None or not zipcode:
            return None
        try:
            return source.fetch(zipcode, ALL_SERVICES)
        except SOURCE_ERRORS as e:
            logger.warning(f"Authoritative path unavailable for {zipcode}: {e}")
            return None

    def _safe_heuristic(self, location: str) -> Tuple[Optional[ScanResult], List[Dict]]:
        if self.oracle is None:
            return None, []
        try:
            return self.oracle.search(location, ALL_SERVICES)
        except SOURCE_ERRORS as e:
            logger.warning(f"AI path unavailable for {location!r}: {e}")
            return None, []

    def _primary_zip(self, location: str) -> Optional[str]:
        if is_zipcode(location):
            return location
        if self.oracle is None:
            return None
        try:
            return self.oracle.resolve_location(location).zipcode
        except SOURCE_ERRORS as e:
            logger.warning(f"Could not find a ZIP for {location!r}: {e}")
            return None

    def _fetch_master(self, location: str, source: Optional[RadioReferenceSource]) -> Tuple[Optional[ScanResult], List[Dict]]:
        zipcode = self._primary_zip(location) if source is not None else None

        authoritative, (heuristic, grounding) = run_concurrently(
            lambda: self._safe_authoritative(source, zipcode),
            lambda: self._safe_heuristic(location),
        )
        master = combine(authoritative, heuristic)
        return master, grounding if heuristic is not None else []

    def merge_and_cache(
        self,
        location: str,
        services: Optional[Iterable[str]] = None,
        credentials: Optional[RRCredentials] = None,
        refresh: bool = False,
    ) -> ScanResult:
        """
        Look up a location through the cache and both sources.

        A usable cache entry is served unless ``refresh`` is set. Otherwise
        both paths run in parallel and are merged into a master record,
        which is cached when non-empty. If neither path produced data, any
        cache entry is used as a last resort.

        Returns:
            The master record filtered to ``services``

        Raises:
            InvalidQueryError: The location is empty
            AuthenticationError: The database rejected the credentials
            LookupFailedError: No source and no cache entry had data
        """
        location = self._location(location)
        services = self._services(services)
        source = self._authoritative(credentials)
        key = self.cache.location_key(location)

        if not refresh:
            cached = self.cache.read(key, has_credentials=source is not None)
            if cached is not None:
                return filter_scan_result(cached, services)

        master, grounding = self._fetch_master(location, source)
        if master is None:
            fallback = self.cache.read(key, enforce_quality=False)
            if fallback is not None:
                logger.warning(f"All sources failed for {location!r}, serving cached entry")
                return filter_scan_result(fallback, services)
            raise LookupFailedError(f"No frequency data available for {location}")

        self.cache.write(key, master, grounding)
        return filter_scan_result(master, services)

    def _resolve_stop(
        self,
        stop: TripLocation,
        zipcode: Optional[str],
        source: Optional[RadioReferenceSource],
        refresh: bool,
    ) -> ScanResult:
        key = self.cache.location_key(stop.location_name)
        if not refresh:
            cached = self.cache.read(key, has_credentials=source is not None)
            if cached is not None:
                return cached

        authoritative = self._safe_authoritative(source, zipcode)
        master = combine(authoritative, stop.data)
        if master is None:
            return stop.data

        self.cache.write(key, master)
        return master

    def plan_trip(
        self,
        start: str,
        end: str,
        services: Optional[Iterable[str]] = None,
        credentials: Optional[RRCredentials] = None,
        refresh: bool = False,
    ) -> TripResult:
        """
        Plan the stops between two places, each with its frequency data.

        Gemini proposes the stops; each stop then gets the same cache and
        merge treatment as a single lookup, with the database queried for
        stops that came with a ZIP code.

        Raises:
            InvalidQueryError: Start or end is empty
            ConfigurationError: No Gemini API key and nothing cached
            LookupFailedError: Gemini failed and nothing is cached
        """
        start = self._location(start)
        end = self._location(end)
        services = self._services(services)
        key = self.cache.trip_key(start, end)

        if not refresh:
            cached = self.cache.read_trip(key)
            if cached is not None:
                return filter_trip_result(cached, services)

        if self.oracle is None:
            raise ConfigurationError("Gemini API key is required to plan a trip")

        try:
            trip, stop_zips, grounding = self.oracle.plan_trip(start, end, ALL_SERVICES)
        except SOURCE_ERRORS as e:
            logger.warning(f"Trip planning failed for {start!r} -> {end!r}: {e}")
            fallback = self.cache.read_trip(key)
            if fallback is not None:
                return filter_trip_result(fallback, services)
            raise LookupFailedError(f"Unable to plan trip from {start} to {end}") from e

        source = self._authoritative(credentials)
        results = fan_out(
            lambda stop: self._resolve_stop(stop, stop_zips.get(stop.location_name), source, refresh),
            trip.locations,
            max_workers=self.config['max_workers'],
            label=lambda stop: f"trip stop {stop.location_name}",
        )
        trip.locations = [
            TripLocation(location_name=stop.location_name, data=data or stop.data)
            for stop, data in results
        ]

        self.cache.write(key, trip, grounding)
        return filter_trip_result(trip, services)

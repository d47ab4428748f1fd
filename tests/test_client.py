import shutil
import tempfile
from unittest import TestCase
from unittest.mock import MagicMock

import httpx

from freqfinder.api.client import FrequencyClient
from freqfinder.api.exceptions import (
    AuthenticationError,
    ConfigurationError,
    InvalidQueryError,
    LookupFailedError,
    ParseError,
    TransportError,
)
from freqfinder.api.merge import ENHANCED_NOTE
from freqfinder.api.models import (
    Agency,
    Frequency,
    RegionInfo,
    RRCredentials,
    ScanResult,
    Source,
    TripLocation,
    TripResult,
)
from freqfinder.api.sources import GeminiOracle
from freqfinder.api.taxonomy import ALL_SERVICES
from freqfinder.api.utils.cache import CacheEntry, CacheStore, FileCacheBackend

from rr_documents import FAULT, ZIP_NOT_FOUND, FakeRPC, default_responses

CREDENTIALS = RRCredentials("scanner", "hunter2")


def _ai_result(*names, location="Washington County, UT"):
    return ScanResult(
        source=Source.AI,
        location_name=location,
        summary="AI overview.",
        agencies=[
            Agency(name, "Police", [Frequency("155.0000")], origin="AI") for name in names
        ],
    )


class ClientTestCase(TestCase):
    def setUp(self):
        self.cache_dir = tempfile.mkdtemp()
        self.backend = FileCacheBackend(self.cache_dir)
        self.cache = CacheStore(self.backend)
        self.rpc = FakeRPC()
        self.oracle = MagicMock()

    def tearDown(self):
        shutil.rmtree(self.cache_dir)

    def client(self, credentials=CREDENTIALS, oracle=None, rpc=None):
        return FrequencyClient(
            credentials=credentials,
            cache=self.cache,
            oracle=oracle,
            rpc=rpc or self.rpc,
            rr_app_key="app-key",
            gemini_api_key=None,
        )


class TestMergeAndCache(ClientTestCase):
    def test_zip_lookup_with_credentials(self):
        result = self.client().merge_and_cache("84770", ["Police"])

        self.assertEqual(Source.API, result.source)
        self.assertEqual("Washington, UT", result.location_name)
        self.assertEqual(
            ["St George Police", "Washington County Sheriff", "Utah Highway Patrol Section 7"],
            [a.name for a in result.agencies],
        )
        self.assertTrue(all(a.category == "Police" for a in result.agencies))
        self.assertEqual(["RR"], list({a.origin for a in result.agencies}))
        self.assertEqual(1, len(result.trunked_systems))
        self.assertEqual(["4001"], [tg.dec for tg in result.trunked_systems[0].talkgroups])
        self.assertTrue(result.cross_ref.verified)
        self.assertEqual(100, result.cross_ref.confidence_score)

    def test_master_record_is_cached_unfiltered(self):
        self.client().merge_and_cache("84770", ["Police"])

        entry = self.backend.get("loc_84770")
        self.assertEqual(4, len(entry.payload['agencies']))
        self.assertEqual(2, len(entry.payload['trunkedSystems'][0]['talkgroups']))

    def test_second_lookup_is_served_from_cache(self):
        client = self.client()
        client.merge_and_cache("84770", ["Police"])
        calls = len(self.rpc.calls)

        result = client.merge_and_cache("84770", ["Fire"])

        self.assertEqual(calls, len(self.rpc.calls))
        self.assertEqual(Source.API, result.source)
        self.assertEqual(["St George Fire"], [a.name for a in result.agencies])

    def test_refresh_bypasses_cache(self):
        client = self.client()
        client.merge_and_cache("84770")
        calls = len(self.rpc.calls)

        client.merge_and_cache("84770", refresh=True)

        self.assertGreater(len(self.rpc.calls), calls)

    def test_merges_ai_discoveries(self):
        self.oracle.search.return_value = (
            _ai_result("St. George Police", "Dixie State University Police"),
            [{'web': {'uri': "https://example.org", 'title': "x"}}],
        )

        result = self.client(oracle=self.oracle).merge_and_cache("84770", ["Police"])

        self.assertEqual(Source.API, result.source)
        self.assertTrue(result.summary.endswith(ENHANCED_NOTE))
        names = [a.name for a in result.agencies]
        self.assertIn("Dixie State University Police", names)
        self.assertNotIn("St. George Police", names)
        self.assertEqual(
            [{'web': {'uri': "https://example.org", 'title': "x"}}],
            self.backend.get("loc_84770").grounding_chunks,
        )
        args, _ = self.oracle.search.call_args
        self.assertEqual(list(ALL_SERVICES), list(args[1]))

    def test_ai_only_without_credentials(self):
        self.oracle.search.return_value = (_ai_result("Sheriff"), [])

        result = self.client(credentials=None, oracle=self.oracle).merge_and_cache("84770")

        self.assertEqual(Source.AI, result.source)
        self.assertEqual([], self.rpc.calls)

    def test_ai_cache_entry_is_upgraded_with_credentials(self):
        self.oracle.search.return_value = (_ai_result("Sheriff"), [])
        self.client(credentials=None, oracle=self.oracle).merge_and_cache("84770")

        result = self.client().merge_and_cache("84770")

        self.assertEqual(Source.API, result.source)
        self.assertIn("getZipcodeInfo", self.rpc.operations())

    def test_stale_cache_entry_triggers_fetch(self):
        self.backend.put(CacheEntry(key="loc_84770", payload={
            'source': "API",
            'locationName': "Washington, UT",
            'agencies': [],
            'trunkedSystems': [{'name': "UCA", 'type': "P25", 'location': "x"}],
        }))

        result = self.client().merge_and_cache("84770")

        self.assertIn("getCountyInfo", self.rpc.operations())
        self.assertEqual(4, len(result.agencies))

    def test_falls_back_to_any_cache_entry(self):
        self.oracle.search.return_value = (_ai_result("Sheriff"), [])
        self.client(credentials=None, oracle=self.oracle).merge_and_cache("84770")

        self.oracle.search.side_effect = TransportError("Gemini down")
        failing = FakeRPC(failures={"getCountyInfo"})

        result = self.client(oracle=self.oracle, rpc=failing).merge_and_cache("84770")

        self.assertEqual(Source.CACHE, result.source)
        self.assertEqual(["Sheriff"], [a.name for a in result.agencies])

    def test_total_failure(self):
        self.oracle.search.side_effect = ParseError("no json")
        failing = FakeRPC(failures={"getZipcodeInfo"})

        with self.assertRaises(LookupFailedError):
            self.client(oracle=self.oracle, rpc=failing).merge_and_cache("84770")

    def test_unreachable_gemini_leaves_database_result(self):
        genai_client = MagicMock()
        genai_client.models.generate_content.side_effect = httpx.ConnectError("dns failure")
        oracle = GeminiOracle(client=genai_client)

        result = self.client(oracle=oracle).merge_and_cache("84770", ["Police"])

        self.assertEqual(Source.API, result.source)
        self.assertEqual(3, len(result.agencies))
        self.assertFalse(result.summary.endswith(ENHANCED_NOTE))

    def test_empty_cache_entry_is_refetched(self):
        self.backend.put(CacheEntry(key="loc_84770", payload={}))

        with self.assertRaises(LookupFailedError):
            self.client(credentials=None).merge_and_cache("84770")

        result = self.client().merge_and_cache("84770")
        self.assertEqual(Source.API, result.source)
        self.assertEqual(4, len(result.agencies))

    def test_unknown_zip_is_not_cached(self):
        rpc = FakeRPC({**default_responses(), "getZipcodeInfo": ZIP_NOT_FOUND})

        with self.assertRaises(LookupFailedError):
            self.client(rpc=rpc).merge_and_cache("84770")
        self.assertEqual(0, self.cache.count())

    def test_authentication_error_is_surfaced(self):
        rpc = FakeRPC({**default_responses(), "getZipcodeInfo": FAULT})
        with self.assertRaises(AuthenticationError):
            self.client(rpc=rpc).merge_and_cache("84770")

    def test_place_name_is_resolved_to_a_zip(self):
        self.oracle.resolve_location.return_value = RegionInfo(
            name="Washington County, UT", zipcode="84770", zips=["84770"]
        )
        self.oracle.search.return_value = (_ai_result("Sheriff"), [])

        result = self.client(oracle=self.oracle).merge_and_cache("St George, UT", ["Police"])

        self.assertEqual(Source.API, result.source)
        self.assertIn("Sheriff", [a.name for a in result.agencies])
        self.assertIsNotNone(self.backend.get("loc_stgeorge,ut"))

    def test_empty_location(self):
        with self.assertRaises(InvalidQueryError):
            self.client().merge_and_cache("  <>  ")


class TestEntryPoints(ClientTestCase):
    def test_resolve_zip_with_credentials(self):
        region = self.client().resolve_location("84770")
        self.assertEqual("2590", region.county_id)
        self.assertEqual("UT", region.state)

    def test_resolve_zip_without_credentials(self):
        region = self.client(credentials=None).resolve_location("84770")
        self.assertEqual("84770", region.zipcode)
        self.assertIsNone(region.county_id)
        self.assertEqual([], self.rpc.calls)

    def test_resolve_free_text(self):
        self.oracle.resolve_location.return_value = RegionInfo(name="Washington County, UT", zipcode="84770")
        region = self.client(oracle=self.oracle).resolve_location("St George")
        self.assertEqual("Washington County, UT", region.name)

    def test_resolve_free_text_fallback(self):
        self.oracle.resolve_location.side_effect = ParseError("bad")
        region = self.client(oracle=self.oracle).resolve_location("St George")
        self.assertEqual("St George", region.name)
        self.assertIsNone(region.zipcode)

    def test_fetch_authoritative(self):
        result = self.client().fetch_authoritative("84770", services=["Fire"])
        self.assertEqual(Source.API, result.source)
        self.assertEqual(["St George Fire"], [a.name for a in result.agencies])
        self.assertEqual(0, self.cache.count())

    def test_fetch_authoritative_requires_credentials(self):
        with self.assertRaises(ConfigurationError):
            self.client(credentials=None).fetch_authoritative("84770")

    def test_fetch_heuristic(self):
        self.oracle.search.return_value = (_ai_result("Sheriff"), [])
        result = self.client(oracle=self.oracle).fetch_heuristic("Nashville, TN", ["Police"])
        self.assertEqual(Source.AI, result.source)

    def test_fetch_heuristic_requires_key(self):
        with self.assertRaises(ConfigurationError):
            self.client().fetch_heuristic("Nashville, TN")


class TestPlanTrip(ClientTestCase):
    def _trip(self):
        return TripResult(
            start_location="St George, UT",
            end_location="Las Vegas, NV",
            locations=[
                TripLocation("Washington County, UT", _ai_result("Sheriff")),
                TripLocation("Clark County, NV", _ai_result("Las Vegas Metro Police", location="Clark County, NV")),
            ],
        )

    def test_plan_trip(self):
        self.oracle.plan_trip.return_value = (self._trip(), {"Washington County, UT": "84770"}, [])

        trip = self.client(oracle=self.oracle).plan_trip("St George, UT", "Las Vegas, NV", ["Police"])

        self.assertEqual(2, len(trip.locations))
        first, second = trip.locations
        self.assertEqual(Source.API, first.data.source)
        self.assertIn("Sheriff", [a.name for a in first.data.agencies])
        self.assertIn("St George Police", [a.name for a in first.data.agencies])
        self.assertEqual(Source.AI, second.data.source)
        self.assertIsNotNone(self.backend.get("trip_stgeorge,ut_to_lasvegas,nv"))
        self.assertIsNotNone(self.backend.get("loc_washingtoncounty,ut"))

    def test_cached_trip(self):
        self.oracle.plan_trip.return_value = (self._trip(), {}, [])
        client = self.client(oracle=self.oracle)
        client.plan_trip("St George, UT", "Las Vegas, NV")

        trip = client.plan_trip("St George, UT", "Las Vegas, NV", ["Police"])

        self.assertEqual(1, self.oracle.plan_trip.call_count)
        self.assertEqual(Source.CACHE, trip.locations[0].data.source)

    def test_trip_failure(self):
        self.oracle.plan_trip.side_effect = TransportError("down")
        with self.assertRaises(LookupFailedError):
            self.client(oracle=self.oracle).plan_trip("St George, UT", "Las Vegas, NV")

    def test_trip_requires_key(self):
        with self.assertRaises(ConfigurationError):
            self.client().plan_trip("St George, UT", "Las Vegas, NV")

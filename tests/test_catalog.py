from unittest import TestCase

from freqfinder.api.exceptions import TransportError
from freqfinder.api.sources.catalog import (
    CatalogEnumerator,
    Subcategory,
    SystemRef,
    parse_subcategories,
    parse_systems,
)

from rr_documents import COUNTY_2590, STATE_49, FakeRPC, envelope


class TestParsing(TestCase):
    def test_parse_subcategories(self):
        self.assertEqual(
            [
                Subcategory("101", "St George Police", "Law Enforcement"),
                Subcategory("102", "Washington County Sheriff", "Law Enforcement"),
                Subcategory("103", "St George Fire", "Fire / EMS"),
            ],
            parse_subcategories(COUNTY_2590),
        )

    def test_subcategory_name_falls_back_to_category(self):
        doc = envelope(
            "getCountyInfo",
            "<cats><item><cName>Interop</cName><subcats>"
            "<item><scid>5</scid></item><item><scid>0</scid></item>"
            "</subcats></item></cats>",
        )
        self.assertEqual([Subcategory("5", "Interop", "Interop")], parse_subcategories(doc))

    def test_parse_systems(self):
        self.assertEqual([SystemRef("7", "Utah Communications Authority")], parse_systems(COUNTY_2590))

    def test_no_systems(self):
        self.assertEqual([], parse_systems(STATE_49))


class TestCatalogEnumerator(TestCase):
    def test_county_and_state(self):
        rpc = FakeRPC()
        catalog = CatalogEnumerator(rpc).enumerate("2590", "49")

        self.assertEqual("Washington", catalog.county_name)
        self.assertEqual(["101", "102", "103", "201"], [s.id for s in catalog.subcategories])
        self.assertEqual(3, catalog.county_subcategory_count)
        self.assertEqual(1, catalog.state_subcategory_count)
        self.assertEqual(["7"], [s.id for s in catalog.systems])
        self.assertEqual({"getCountyInfo", "getStateInfo"}, set(rpc.operations()))

    def test_county_only(self):
        rpc = FakeRPC()
        catalog = CatalogEnumerator(rpc).enumerate("2590")
        self.assertEqual(["101", "102", "103"], [s.id for s in catalog.subcategories])
        self.assertEqual(["getCountyInfo"], rpc.operations())

    def test_caps_keep_county_items_first(self):
        catalog = CatalogEnumerator(FakeRPC(), max_subcategories=2, max_systems=0).enumerate("2590", "49")
        self.assertEqual(["101", "102"], [s.id for s in catalog.subcategories])
        self.assertEqual([], catalog.systems)

    def test_state_failure_is_absorbed(self):
        catalog = CatalogEnumerator(FakeRPC(failures={"getStateInfo"})).enumerate("2590", "49")
        self.assertEqual(["101", "102", "103"], [s.id for s in catalog.subcategories])

    def test_county_failure_raises(self):
        with self.assertRaises(TransportError):
            CatalogEnumerator(FakeRPC(failures={"getCountyInfo"})).enumerate("2590", "49")

from unittest import TestCase

from freqfinder.api.models import TrunkedSystemFrequency
from freqfinder.api.sources.catalog import Subcategory, SystemRef
from freqfinder.api.sources.fetcher import (
    FrequencyFetcher,
    parse_frequencies,
    parse_sites,
    parse_talkgroups,
    system_type_label,
)
from freqfinder.api.taxonomy import relevant_tag_ids

from rr_documents import SUBCAT_FREQS, TRS_SITES, TRS_TALKGROUPS, FakeRPC, envelope


class TestParseFrequencies(TestCase):
    def test_all_tags(self):
        freqs = parse_frequencies(SUBCAT_FREQS["101"], frozenset())
        self.assertEqual(["155.4150", "154.8000"], [f.freq for f in freqs])
        self.assertEqual("Law Dispatch", freqs[0].tag)
        self.assertEqual("100.0", freqs[0].tone)
        self.assertEqual("Police Dispatch", freqs[0].description)
        self.assertEqual("Law Tactical", freqs[1].tag)

    def test_tag_filter(self):
        freqs = parse_frequencies(SUBCAT_FREQS["103"], frozenset({4}))
        self.assertEqual(["154.4300"], [f.freq for f in freqs])

    def test_untagged_items_are_kept(self):
        doc = envelope("getSubcatFreqs", "<item><out>460.125</out><descr>Untagged</descr></item>")
        freqs = parse_frequencies(doc, frozenset({1}))
        self.assertEqual(1, len(freqs))
        self.assertEqual("Other", freqs[0].tag)
        self.assertEqual("FM", freqs[0].mode)

    def test_zero_and_missing_output_are_skipped(self):
        doc = envelope(
            "getSubcatFreqs",
            "<item><out>0</out></item><item><descr>none</descr></item><item><out>abc</out></item>",
        )
        self.assertEqual([], parse_frequencies(doc, frozenset()))


class TestParseSites(TestCase):
    def test_target_county_sites_first(self):
        sites = parse_sites(TRS_SITES, "2590")
        self.assertEqual(["Webb Hill", "Salt Lake"], [s.description for s in sites])
        self.assertEqual(
            [TrunkedSystemFrequency("852.5000", "d"), TrunkedSystemFrequency("853.2625", "Unknown")],
            sites[0].frequencies,
        )

    def test_order_kept_when_no_site_matches(self):
        sites = parse_sites(TRS_SITES, "1")
        self.assertEqual(["Salt Lake", "Webb Hill"], [s.description for s in sites])

    def test_description_fallbacks(self):
        doc = envelope(
            "getTrsSites",
            "<item><siteLocation>Mountain Top</siteLocation></item><item><siteId>3</siteId></item>",
        )
        self.assertEqual(["Mountain Top", "Unknown Site"], [s.description for s in parse_sites(doc, "")])


class TestParseTalkgroups(TestCase):
    def test_modes_and_hex(self):
        talkgroups = parse_talkgroups(TRS_TALKGROUPS, frozenset())
        self.assertEqual(["4001", "4101"], [tg.dec for tg in talkgroups])
        self.assertEqual("TDMA", talkgroups[0].mode)
        self.assertEqual("fa1", talkgroups[0].hex)
        self.assertEqual("D", talkgroups[1].mode)
        self.assertEqual("Fire Dispatch", talkgroups[1].tag)

    def test_tag_filter(self):
        talkgroups = parse_talkgroups(TRS_TALKGROUPS, relevant_tag_ids(["Police"]))
        self.assertEqual(["4001"], [tg.dec for tg in talkgroups])

    def test_system_type_label(self):
        self.assertEqual("P25 Phase II", system_type_label("5"))
        self.assertEqual("Motorola Type II", system_type_label("2"))
        self.assertEqual("Trunked (Type 42)", system_type_label("42"))
        self.assertEqual("Trunked (Type )", system_type_label(""))


class TestFrequencyFetcher(TestCase):
    def test_fetch_agencies(self):
        subcategories = [
            Subcategory("101", "St George Police", "Law Enforcement"),
            Subcategory("103", "St George Fire", "Fire / EMS"),
        ]
        agencies = FrequencyFetcher(FakeRPC()).fetch_agencies(subcategories, frozenset())

        self.assertEqual(["St George Police", "St George Fire"], [a.name for a in agencies])
        self.assertEqual(["Police", "Fire"], [a.category for a in agencies])

    def test_failed_subcategory_is_dropped(self):
        rpc = FakeRPC(failures={("getSubcatFreqs", "101")})
        subcategories = [
            Subcategory("101", "St George Police", "Law Enforcement"),
            Subcategory("103", "St George Fire", "Fire / EMS"),
        ]
        agencies = FrequencyFetcher(rpc).fetch_agencies(subcategories, frozenset())
        self.assertEqual(["St George Fire"], [a.name for a in agencies])

    def test_agency_without_matching_frequencies_is_dropped(self):
        subcategories = [Subcategory("103", "St George Fire", "Fire / EMS")]
        agencies = FrequencyFetcher(FakeRPC()).fetch_agencies(subcategories, frozenset({1}))
        self.assertEqual([], agencies)

    def test_fetch_systems(self):
        rpc = FakeRPC()
        systems = FrequencyFetcher(rpc).fetch_systems([SystemRef("7", "UCA")], "2590", frozenset())

        self.assertEqual(1, len(systems))
        system = systems[0]
        self.assertEqual("Utah Communications Authority (UCA)", system.name)
        self.assertEqual("P25 Phase II", system.type)
        self.assertEqual("Webb Hill", system.location)
        self.assertEqual(["852.5000", "853.2625"], [f.freq for f in system.frequencies])
        self.assertEqual(2, len(system.talkgroups))
        self.assertEqual(
            ["getTrsDetails", "getTrsSites", "getTrsTalkgroups"],
            sorted(rpc.operations()),
        )

    def test_system_without_sites_or_talkgroups_is_dropped(self):
        rpc = FakeRPC({
            "getTrsDetails": envelope("getTrsDetails", "<sName>Empty</sName>"),
            "getTrsSites": envelope("getTrsSites", ""),
            "getTrsTalkgroups": envelope("getTrsTalkgroups", ""),
        })
        self.assertEqual([], FrequencyFetcher(rpc).fetch_systems([SystemRef("9", "Empty")], "1", frozenset()))

    def test_failed_system_is_dropped(self):
        rpc = FakeRPC(failures={"getTrsSites"})
        self.assertEqual([], FrequencyFetcher(rpc).fetch_systems([SystemRef("7", "UCA")], "2590", frozenset()))

    def test_talkgroups_only_system_uses_default_location(self):
        rpc = FakeRPC({
            "getTrsDetails": envelope("getTrsDetails", ""),
            "getTrsSites": envelope("getTrsSites", ""),
            "getTrsTalkgroups": TRS_TALKGROUPS,
        })
        systems = FrequencyFetcher(rpc).fetch_systems(
            [SystemRef("7", "UCA")], "2590", frozenset(), default_location="Washington, UT"
        )
        self.assertEqual("UCA", systems[0].name)
        self.assertEqual("Washington, UT", systems[0].location)
        self.assertEqual([], systems[0].frequencies)
        self.assertEqual("Trunked (Type )", systems[0].type)

from unittest import TestCase

from freqfinder.api.soap import markup

NESTED = (
    "<return>"
    "<item><siteDescr>A</siteDescr><siteFreqs>"
    "<item><freq>851.0125</freq></item><item><freq>852.0125</freq></item>"
    "</siteFreqs></item>"
    "<item><siteDescr>B</siteDescr><siteFreqs>"
    "<item><freq>853.0125</freq><sub><item><x>deep</x></item></sub></item>"
    "</siteFreqs></item>"
    "</return>"
)


class TestGetText(TestCase):
    def test_first_element_text(self):
        self.assertEqual("84770", markup.get_text("<a><zip> 84770 </zip><zip>1</zip></a>", "zip"))

    def test_missing_element_is_empty_string(self):
        self.assertEqual("", markup.get_text("<a><b>1</b></a>", "c"))

    def test_tag_names_match_case_insensitively(self):
        self.assertEqual("Washington", markup.get_text("<countyName>Washington</countyName>", "countyName"))

    def test_entities_are_decoded(self):
        self.assertEqual("Fire & Rescue", markup.get_text("<cName>Fire &amp; Rescue</cName>", "cName"))


class TestGetGroups(TestCase):
    def test_returns_only_top_level_groups(self):
        groups = markup.get_groups(NESTED)
        self.assertEqual(2, len(groups))
        self.assertEqual("A", markup.get_text(groups[0], "siteDescr"))
        self.assertEqual("B", markup.get_text(groups[1], "siteDescr"))

    def test_nested_groups_stay_inside_parent(self):
        first = markup.get_groups(NESTED)[0]
        freqs = markup.get_groups(markup.get_section(first, "siteFreqs"))
        self.assertEqual(["851.0125", "852.0125"], [markup.get_text(f, "freq") for f in freqs])

    def test_reextracting_from_parent_matches_direct_extraction(self):
        direct = [
            node.decode_contents()
            for site in markup.get_group_nodes(NESTED)
            for node in markup.section_groups(site, "siteFreqs")
        ]
        via_strings = [
            inner
            for site in markup.get_groups(NESTED)
            for inner in markup.get_groups(markup.get_section(site, "siteFreqs"))
        ]
        self.assertEqual(direct, via_strings)

    def test_three_levels_of_nesting(self):
        second_site = markup.get_groups(NESTED)[1]
        freq = markup.get_groups(markup.get_section(second_site, "siteFreqs"))[0]
        deep = markup.get_groups(markup.get_section(freq, "sub"))
        self.assertEqual(1, len(deep))
        self.assertEqual("deep", markup.get_text(deep[0], "x"))

    def test_no_groups(self):
        self.assertEqual([], markup.get_groups("<return><ctid>0</ctid></return>"))
        self.assertEqual([], markup.get_groups(""))

    def test_truncated_document_yields_what_is_complete(self):
        truncated = "<return><item><a>1</a></item><item><a>2</a></item><item><a>3"
        groups = markup.get_groups(truncated)
        self.assertGreaterEqual(len(groups), 2)
        self.assertEqual("1", markup.get_text(groups[0], "a"))
        self.assertEqual("2", markup.get_text(groups[1], "a"))

    def test_section_groups_missing_section(self):
        self.assertEqual([], markup.section_groups("<return/>", "cats"))

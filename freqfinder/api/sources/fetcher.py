"""
Per-subcategory channel and per-system talkgroup fetching.
"""

import logging
from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional

from ..models import Agency, Frequency, Talkgroup, TrunkedSystem, TrunkedSystemFrequency
from ..models.frequency import format_freq
from ..models.talkgroup import dec_to_hex
from ..soap import markup
from ..soap.envelope import param
from ..taxonomy import infer_category, tag_name
from ..utils.pool import fan_out, run_concurrently
from .catalog import Subcategory, SystemRef

logger = logging.getLogger(__name__)

SYSTEM_TYPES = {
    1: "Motorola Type I",
    2: "Motorola Type II",
    3: "Motorola Type IIi Hybrid",
    4: "P25 Standard",
    5: "P25 Phase II",
    6: "EDACS Standard",
    7: "EDACS Scat",
    8: "EDACS Networked",
    9: "LTR Standard",
    10: "LTR Net",
    11: "MPT1327",
    12: "PASSPORT",
    13: "DMR Conventional Networked",
    14: "DMR Tier III",
    15: "NXDN Conventional",
    16: "NXDN Trunked (Type-D)",
    17: "NXDN Trunked (Type-C)",
}

TALKGROUP_MODES = {"D": "D", "A": "A", "T": "TDMA", "E": "Encrypted"}


@dataclass
class Site:
    description: str
    county_id: str = ""
    frequencies: List[TrunkedSystemFrequency] = field(default_factory=list)


def system_type_label(type_id: str) -> str:
    try:
        return SYSTEM_TYPES.get(int(type_id), f"Trunked (Type {type_id})")
    except (TypeError, ValueError):
        return f"Trunked (Type {type_id})"


def extract_tag_ids(node) -> List[int]:
    tags = markup.get_section(node, "tags")
    if tags is None:
        return []
    ids = []
    for text in markup.get_all_text(tags, "tagId"):
        if text.isdigit():
            ids.append(int(text))
    return ids


def is_relevant(tag_ids: List[int], relevant_tags: AbstractSet[int]) -> bool:
    """
    Tag filter shared by channels and talkgroups.

    An empty ``relevant_tags`` keeps everything. Untagged records are kept
    because they cannot be classified.
    """
    if not relevant_tags or not tag_ids:
        return True
    return any(t in relevant_tags for t in tag_ids)


def parse_frequencies(document, relevant_tags: AbstractSet[int]) -> List[Frequency]:
    results = []
    for item in markup.get_group_nodes(document):
        freq = format_freq(markup.get_text(item, "out"))
        if freq is None:
            continue

        tag_ids = extract_tag_ids(item)
        if not is_relevant(tag_ids, relevant_tags):
            continue

        results.append(Frequency(
            freq=freq,
            description=markup.get_text(item, "descr"),
            mode=markup.get_text(item, "mode") or "FM",
            tag=tag_name(tag_ids[0]) if tag_ids else "Other",
            alpha_tag=markup.get_text(item, "alpha"),
            tone=markup.get_text(item, "tone"),
            color_code=markup.get_text(item, "colorCode"),
            nac=markup.get_text(item, "nac"),
            ran=markup.get_text(item, "ran"),
        ))
    return results


def parse_sites(document, target_county_id: str) -> List[Site]:
    """Parse a site list, sites in ``target_county_id`` first (stable)."""
    sites = []
    for item in markup.get_group_nodes(document):
        frequencies = []
        for f in markup.section_groups(item, "siteFreqs"):
            freq = format_freq(markup.get_text(f, "freq"))
            if freq is not None:
                frequencies.append(TrunkedSystemFrequency(
                    freq=freq,
                    use=markup.get_text(f, "use") or "Unknown",
                ))

        sites.append(Site(
            description=(
                markup.get_text(item, "siteDescr")
                or markup.get_text(item, "siteLocation")
                or "Unknown Site"
            ),
            county_id=markup.get_text(item, "siteCtid"),
            frequencies=frequencies,
        ))

    sites.sort(key=lambda s: s.county_id != target_county_id)
    return sites


def parse_talkgroups(document, relevant_tags: AbstractSet[int]) -> List[Talkgroup]:
    results = []
    for item in markup.get_group_nodes(document):
        dec = markup.get_text(item, "tgDec")
        if not dec or dec == "0":
            continue

        tag_ids = extract_tag_ids(item)
        if not is_relevant(tag_ids, relevant_tags):
            continue

        mode = markup.get_text(item, "tgMode") or "D"
        results.append(Talkgroup(
            dec=dec,
            hex=dec_to_hex(dec),
            mode=TALKGROUP_MODES.get(mode, mode),
            alpha_tag=markup.get_text(item, "tgAlpha"),
            description=markup.get_text(item, "tgDescr"),
            tag=tag_name(tag_ids[0]) if tag_ids else "Other",
        ))
    return results


class FrequencyFetcher:
    """
    Fans out channel and trunked system calls for an enumerated catalog.

    Each subcategory and each system is fetched independently; a failure
    drops that unit and is logged, it never aborts the rest.
    """

    def __init__(self, rpc, max_workers: int = 10, max_system_workers: int = 1):
        self.rpc = rpc
        self.max_workers = max_workers
        self.max_system_workers = max_system_workers

    def fetch_agency(self, subcategory: Subcategory, relevant_tags: AbstractSet[int]) -> Optional[Agency]:
        document = self.rpc.call("getSubcatFreqs", param("scid", subcategory.id))
        frequencies = parse_frequencies(document, relevant_tags)
        if not frequencies:
            return None
        return Agency(
            name=subcategory.name,
            category=infer_category(subcategory.category_name, subcategory.name),
            frequencies=frequencies,
        )

    def fetch_agencies(self, subcategories: List[Subcategory], relevant_tags: AbstractSet[int]) -> List[Agency]:
        logger.info(f"Fetching {len(subcategories)} subcategory frequency sets")
        results = fan_out(
            lambda sc: self.fetch_agency(sc, relevant_tags),
            subcategories,
            max_workers=self.max_workers,
            label=lambda sc: f"subcategory {sc.id} ({sc.name})",
        )
        return [agency for _, agency in results if agency is not None]

    def fetch_system(
        self,
        ref: SystemRef,
        target_county_id: str,
        relevant_tags: AbstractSet[int],
        default_location: str = "",
    ) -> Optional[TrunkedSystem]:
        sid = param("sid", ref.id)
        all_talkgroups = sid + param("tgCid", 0) + param("tgTag", 0) + param("tgDec", 0)

        detail_xml, sites_xml, tg_xml = run_concurrently(
            lambda: self.rpc.call("getTrsDetails", sid),
            lambda: self.rpc.call("getTrsSites", sid),
            lambda: self.rpc.call("getTrsTalkgroups", all_talkgroups),
        )

        sites = parse_sites(sites_xml, target_county_id)
        talkgroups = parse_talkgroups(tg_xml, relevant_tags)
        if not sites and not talkgroups:
            logger.debug(f"Skipping system {ref.id}: no sites or talkgroups")
            return None

        primary = sites[0] if sites else None
        return TrunkedSystem(
            name=markup.get_text(detail_xml, "sName") or ref.name,
            type=system_type_label(markup.get_text(detail_xml, "sType")),
            location=primary.description if primary else default_location,
            frequencies=primary.frequencies if primary else [],
            talkgroups=talkgroups,
        )

    def fetch_systems(
        self,
        systems: List[SystemRef],
        target_county_id: str,
        relevant_tags: AbstractSet[int],
        default_location: str = "",
    ) -> List[TrunkedSystem]:
        logger.info(f"Fetching {len(systems)} trunked systems")
        results = fan_out(
            lambda ref: self.fetch_system(ref, target_county_id, relevant_tags, default_location),
            systems,
            max_workers=self.max_system_workers,
            label=lambda ref: f"trunked system {ref.id} ({ref.name})",
        )
        return [system for _, system in results if system is not None]

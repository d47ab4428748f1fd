"""
Enumeration of subcategories and trunked systems for a county.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..exceptions import TransportError
from ..soap import markup
from ..soap.envelope import param
from ..utils.pool import run_concurrently

logger = logging.getLogger(__name__)

MAX_SUBCATEGORIES = 150
MAX_SYSTEMS = 50


@dataclass(frozen=True)
class Subcategory:
    id: str
    name: str
    category_name: str


@dataclass(frozen=True)
class SystemRef:
    id: str
    name: str


@dataclass
class Catalog:
    county_name: str = ""
    subcategories: List[Subcategory] = field(default_factory=list)
    systems: List[SystemRef] = field(default_factory=list)
    county_subcategory_count: int = 0
    state_subcategory_count: int = 0


def parse_subcategories(document) -> List[Subcategory]:
    """Flatten the category -> subcategory tree of a county or state."""
    results = []
    for cat in markup.section_groups(document, "cats"):
        cat_name = markup.get_text(cat, "cName")
        for sub in markup.section_groups(cat, "subcats"):
            scid = markup.get_text(sub, "scid")
            if not scid or scid == "0":
                continue
            results.append(Subcategory(
                id=scid,
                name=markup.get_text(sub, "scName") or cat_name,
                category_name=cat_name,
            ))
    return results


def parse_systems(document) -> List[SystemRef]:
    results = []
    for trs in markup.section_groups(document, "trsList"):
        sid = markup.get_text(trs, "sid")
        if sid and sid != "0":
            results.append(SystemRef(id=sid, name=markup.get_text(trs, "sName")))
    return results


class CatalogEnumerator:
    """
    Lists what can be fetched for a county.

    County and state metadata are requested together; state-level
    subcategories cover agencies that are not county-scoped (state patrol,
    DOT). Totals are capped to bound downstream work, county items first.
    """

    def __init__(self, rpc, max_subcategories: int = MAX_SUBCATEGORIES, max_systems: int = MAX_SYSTEMS):
        self.rpc = rpc
        self.max_subcategories = max_subcategories
        self.max_systems = max_systems

    def _state_info(self, state_id: str) -> Optional[str]:
        try:
            return self.rpc.call("getStateInfo", param("stid", state_id))
        except TransportError as e:
            logger.warning(f"getStateInfo failed for stid={state_id}, continuing with county only: {e}")
            return None

    def enumerate(self, county_id: str, state_id: Optional[str] = None) -> Catalog:
        """
        Raises:
            TransportError: The county metadata call failed
        """
        logger.info(f"getCountyInfo for ctid={county_id}")
        if state_id:
            county_xml, state_xml = run_concurrently(
                lambda: self.rpc.call("getCountyInfo", param("ctid", county_id)),
                lambda: self._state_info(state_id),
            )
        else:
            county_xml = self.rpc.call("getCountyInfo", param("ctid", county_id))
            state_xml = None

        county_doc = markup.parse(county_xml)
        county_subcats = parse_subcategories(county_doc)
        state_subcats = parse_subcategories(state_xml) if state_xml else []
        systems = parse_systems(county_doc)

        catalog = Catalog(
            county_name=markup.get_text(county_doc, "countyName"),
            subcategories=(county_subcats + state_subcats)[:self.max_subcategories],
            systems=systems[:self.max_systems],
            county_subcategory_count=len(county_subcats),
            state_subcategory_count=len(state_subcats),
        )
        logger.info(
            f"Catalog for ctid={county_id}: {len(catalog.subcategories)} subcategories "
            f"(county {len(county_subcats)}, state {len(state_subcats)}), "
            f"{len(catalog.systems)} of {len(systems)} trunked systems"
        )
        return catalog

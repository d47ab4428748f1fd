"""
Combining authoritative and heuristic results for one location.
"""

import copy
import logging
from typing import Optional

from .models import ScanResult, Source
from .utils.text import normalize_name

logger = logging.getLogger(__name__)

ENHANCED_NOTE = " (Enhanced with AI discovery)"


def merge_results(authoritative: ScanResult, heuristic: ScanResult) -> ScanResult:
    """
    Merge a heuristic result into an authoritative one.

    The authoritative result is copied and never altered by the heuristic
    side: only agencies and systems whose normalized name is not already
    present are appended. Near-duplicates such as "Metro Police" and
    "Metro Police Dept" normalize differently and are both kept.
    """
    merged = copy.deepcopy(authoritative)
    merged.source = Source.API
    merged.summary = f"{merged.summary}{ENHANCED_NOTE}"

    agency_names = {normalize_name(a.name) for a in merged.agencies}
    added_agencies = 0
    for agency in heuristic.agencies:
        key = normalize_name(agency.name)
        if key in agency_names:
            continue
        agency_names.add(key)
        merged.agencies.append(copy.deepcopy(agency))
        added_agencies += 1

    system_names = {normalize_name(s.name) for s in merged.trunked_systems}
    added_systems = 0
    for system in heuristic.trunked_systems:
        key = normalize_name(system.name)
        if key in system_names:
            continue
        system_names.add(key)
        merged.trunked_systems.append(copy.deepcopy(system))
        added_systems += 1

    logger.info(
        f"Merged {merged.location_name}: +{added_agencies} agencies, "
        f"+{added_systems} systems from AI"
    )
    return merged


def combine(authoritative: Optional[ScanResult], heuristic: Optional[ScanResult]) -> Optional[ScanResult]:
    """
    Pick or merge whichever sources produced data.

    An empty result counts as unavailable. Returns ``None`` when neither
    side has anything.
    """
    has_auth = authoritative is not None and not authoritative.is_empty()
    has_heur = heuristic is not None and not heuristic.is_empty()

    if has_auth and has_heur:
        return merge_results(authoritative, heuristic)
    if has_auth:
        return authoritative
    if has_heur:
        return heuristic
    return None

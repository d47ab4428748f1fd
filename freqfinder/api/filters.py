"""
Projection of a master result down to the requested service categories.
"""

import copy
from typing import Iterable, List

from .models import ScanResult, TripResult
from .taxonomy import SERVICE_KEYWORDS, ServiceType


def _requested(services: Iterable[str]) -> List[ServiceType]:
    members = []
    for service in services:
        member = ServiceType.lookup(service)
        if member is not None and member not in members:
            members.append(member)
    return members


def is_category_allowed(text: str, services: Iterable[str]) -> bool:
    """
    Whether free text (a category, tag or description) matches any
    requested service.

    An exact category name match wins; otherwise the per-service keyword
    lists are checked as substrings, then the service name itself.
    """
    value = (text or "").lower()
    for member in _requested(services):
        if value == member.value.lower():
            return True
        if any(keyword in value for keyword in SERVICE_KEYWORDS.get(member, ())):
            return True
        if member.value.lower() in value:
            return True
    return False


def filter_scan_result(result: ScanResult, services: Iterable[str]) -> ScanResult:
    """
    Keep only agencies and talkgroups matching ``services``.

    Trunked systems are never dropped, their control channels are needed
    whatever is being listened to. The input is not modified.
    """
    services = list(services)
    filtered = copy.deepcopy(result)

    filtered.agencies = [
        agency for agency in filtered.agencies
        if is_category_allowed(agency.category, services)
    ]
    for system in filtered.trunked_systems:
        system.talkgroups = [
            tg for tg in system.talkgroups
            if is_category_allowed(f"{tg.tag} {tg.description}", services)
        ]
    return filtered


def filter_trip_result(trip: TripResult, services: Iterable[str]) -> TripResult:
    services = list(services)
    filtered = copy.deepcopy(trip)
    for stop in filtered.locations:
        stop.data = filter_scan_result(stop.data, services)
    return filtered

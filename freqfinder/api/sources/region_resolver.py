"""
ZIP code to (county, state) resolution against the database.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import AuthenticationError, InvalidQueryError, NotFoundError, TransportError
from ..models import RegionInfo
from ..soap import markup
from ..soap.envelope import param
from ..utils.geography import expected_state_id, state_abbr
from ..utils.text import clean_zipcode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZipCandidate:
    county_id: str
    state_id: str
    city: str


def parse_candidates(document: str) -> List[ZipCandidate]:
    """
    Pull every (county, state, city) candidate out of a ZIP lookup response.

    The database answers with a run of items, or with the fields directly on
    the response when there is a single match. Candidates without a county
    are dropped.
    """
    root = markup.parse(document)
    nodes = markup.get_group_nodes(root)
    if not nodes:
        root_ctid = markup.get_text(root, "ctid")
        if root_ctid and root_ctid != "0":
            nodes = [root]

    candidates = []
    for node in nodes:
        county_id = markup.get_text(node, "ctid")
        if not county_id or county_id == "0":
            continue
        candidates.append(ZipCandidate(
            county_id=county_id,
            state_id=markup.get_text(node, "stid"),
            city=markup.get_text(node, "city"),
        ))
    return candidates


def choose_candidate(zipcode: str, candidates: List[ZipCandidate]) -> Optional[ZipCandidate]:
    """
    Pick the candidate whose state agrees with the ZIP prefix.

    When none agrees, the first candidate is used with its state replaced by
    the one the prefix implies. Without a known prefix the first candidate
    wins as-is.
    """
    if not candidates:
        return None

    expected = expected_state_id(zipcode)
    if expected is None:
        return candidates[0]

    for candidate in candidates:
        if candidate.state_id == expected:
            return candidate

    first = candidates[0]
    if first.state_id != expected:
        logger.warning(
            f"Corrected state id from {first.state_id} to {expected} for ZIP {zipcode}"
        )
    return ZipCandidate(county_id=first.county_id, state_id=expected, city=first.city)


class RegionResolver:
    """Turns a ZIP code into the database's county and state ids."""

    def __init__(self, rpc):
        self.rpc = rpc

    def resolve(self, zipcode: str) -> RegionInfo:
        """
        Resolve a 5-digit ZIP code.

        Raises:
            InvalidQueryError: The ZIP is not five digits
            AuthenticationError: The database returned a fault
            NotFoundError: No candidate county was returned
            TransportError: The lookup call failed
        """
        zipcode = clean_zipcode(zipcode)
        if len(zipcode) != 5:
            raise InvalidQueryError("Invalid ZIP code. Must be 5 digits.")

        logger.info(f"getZipcodeInfo for {zipcode}")
        try:
            document = self.rpc.call("getZipcodeInfo", param("zipcode", zipcode))
        except TransportError as e:
            fault = markup.get_text(e.body, "faultstring") if e.body else ""
            if fault:
                raise AuthenticationError(f"RadioReference: {fault}") from e
            raise

        candidate = choose_candidate(zipcode, parse_candidates(document))
        if candidate is None:
            fault = markup.get_text(document, "faultstring")
            if fault:
                raise AuthenticationError(f"RadioReference: {fault}")
            raise NotFoundError(f"ZIP code {zipcode} not found in RadioReference database")

        abbr = state_abbr(candidate.state_id)
        logger.info(
            f"ZIP {zipcode} -> city {candidate.city}, county {candidate.county_id}, "
            f"state {candidate.state_id} ({abbr})"
        )
        return RegionInfo(
            name=f"{candidate.city}, {abbr}" if candidate.city else zipcode,
            zipcode=zipcode,
            county_id=candidate.county_id,
            state_id=candidate.state_id,
            state=abbr,
            city=candidate.city,
            zips=[zipcode],
        )

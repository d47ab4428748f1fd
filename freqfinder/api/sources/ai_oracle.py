"""
Heuristic lookups through Gemini, optionally grounded with Google Search.

The model is treated as a text-in, JSON-out oracle. Answers are free-form
text that should hold one fenced JSON object; ``extract_json`` recovers it
from the usual formatting deviations.
"""

import json
import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

import httpx
from google import genai
from google.genai import errors, types

from ..exceptions import ParseError, TransportError
from ..models import Origin, RegionInfo, ScanResult, Source, TripResult
from ..utils.text import MAX_SERVICES, is_zipcode, sanitize_location

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_SERVICES = ("Police", "Fire", "EMS")

# Status codes that mean the search tool itself was refused.
TOOL_REJECTED_CODES = (400, 403)

FENCED_JSON_RE = re.compile(r"```json\s*\n([\s\S]*?)(?:\n```|$)")

SEARCH_PROMPT = """
You are an intelligent interface for the RadioReference Database.
Task: Retrieve the official radio frequency data for Location: "{location}".
IMPORTANT: If the location is a ZIP CODE, first identify the County and State.

SCOPE: {services}.

INCLUSION RULES:
1. Statewide/Regional Systems: include large trunked systems if they cover the area.
2. Synonyms: "Police" includes Sheriff, Highway Patrol. "Fire" includes Rescue.
3. Conventional: include analog frequencies.

DATA EXTRACTION:
1. Trunked System Sites: identify specific sites/towers for "{location}".
2. Control Channels: extract the control channel frequencies for that site.
3. Tone/NAC: capture PL/DPL/NAC.

OUTPUT FORMAT:
Return strictly formatted JSON inside a code block.
```json
{{
  "source": "AI",
  "locationName": "County, State",
  "summary": "Overview...",
  "crossRef": {{"verified": true, "confidenceScore": 95, "sourcesChecked": 3, "notes": "Verified."}},
  "agencies": [
    {{
      "name": "Agency Name",
      "category": "Police",
      "frequencies": [{{"freq": "155.0000", "description": "Dispatch", "mode": "FMN", "tag": "Law Dispatch", "alphaTag": "PD", "tone": "123.4", "nac": "293"}}]
    }}
  ],
  "trunkedSystems": [
    {{
      "name": "System Name",
      "type": "P25",
      "location": "Site Name",
      "frequencies": [{{"freq": "851.0000", "use": "Control"}}],
      "talkgroups": [{{"dec": "123", "mode": "D", "alphaTag": "DISP", "description": "Dispatch", "tag": "Law Dispatch"}}]
    }}
  ]
}}
```
"""

TRIP_PROMPT = """
I am planning a road trip from {start} to {end}.

Task:
1. Identify the driving route and select 3-5 major distinct jurisdictions (Counties/Cities) along the path.
2. For EACH jurisdiction, give its most central 5-digit ZIP code and retrieve radio frequency data for: {services}.

DATA REQUIREMENTS:
- Provide specific frequencies, tones and talkgroups, not just agency names.
- For P25/trunked systems, list the control channel frequencies of the local sites.

OUTPUT FORMAT:
Return a single JSON object inside a code block:
```json
{{
  "startLocation": "{start}",
  "endLocation": "{end}",
  "locations": [
    {{
      "locationName": "County/City, State",
      "zipcode": "12345",
      "data": {{
        "source": "AI",
        "locationName": "County/City, State",
        "summary": "Brief overview of radio systems here.",
        "agencies": [
          {{"name": "Sheriff", "category": "Police", "frequencies": [{{"freq": "155.0000", "description": "Dispatch", "mode": "FMN", "tag": "Law Dispatch", "alphaTag": "SHERIFF", "tone": "100.0"}}]}}
        ],
        "trunkedSystems": [
          {{"name": "System Name", "type": "P25 Standard", "location": "Site Name", "frequencies": [{{"freq": "851.0000", "use": "Control"}}], "talkgroups": [{{"dec": "101", "mode": "D", "alphaTag": "DISP", "description": "Dispatch", "tag": "Law Dispatch"}}]}}
        ]
      }}
    }}
  ]
}}
```
"""

RESOLVE_PROMPT = """
Task: Identify the US County and State for the location "{query}".
Output: JSON only.

Requirements:
1. Identify the 'County, ST' for "{query}".
2. List ALL 5-digit ZIP codes physically located in that County.
3. Pick one central or populous ZIP code as 'primaryZip'.

Format:
{{"standardizedName": "Washington County, UT", "primaryZip": "84770", "zips": ["84770", "84771", "84790", "84780"]}}
"""


def _loads_object(text: str) -> Optional[Dict]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def extract_json(text: str) -> Optional[Dict]:
    """
    Recover a JSON object from model output.

    Tries, in order: a fenced ```json block, the whole text, and the span
    from the first ``{`` to the last ``}``.

    Returns:
        The parsed object, or ``None`` when every attempt fails
    """
    if not text:
        return None

    match = FENCED_JSON_RE.search(text)
    if match:
        data = _loads_object(match.group(1))
        if data is not None:
            return data

    data = _loads_object(text)
    if data is not None:
        return data

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return _loads_object(text[start:end + 1])
    return None


def _stamp_origin(result: ScanResult) -> ScanResult:
    for agency in result.agencies:
        agency.origin = Origin.AI.value
    for system in result.trunked_systems:
        system.origin = Origin.AI.value
    return result


def _grounding_chunks(response) -> List[Dict]:
    """Pull ``(uri, title)`` pairs from a grounded response."""
    chunks = []
    for candidate in (getattr(response, "candidates", None) or [])[:1]:
        metadata = getattr(candidate, "grounding_metadata", None)
        for chunk in (getattr(metadata, "grounding_chunks", None) or []):
            web = getattr(chunk, "web", None)
            if web is not None and getattr(web, "uri", None):
                chunks.append({'web': {'uri': web.uri, 'title': web.title or ""}})
    return chunks


class GeminiOracle:
    """Generative lookups for a location, a trip, or a free-text place."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        use_search: bool = True,
        client=None,
    ):
        self.model = model
        self.use_search = use_search
        self._client = client or genai.Client(api_key=api_key)

    def _generate(self, prompt: str, config: Optional[types.GenerateContentConfig] = None) -> Tuple[str, List[Dict]]:
        """
        Send one prompt.

        With search grounding on, a 400/403 from the provider is taken to be
        a refusal of the tool and the prompt is resent without it.

        Raises:
            TransportError: The provider call failed
        """
        used_tools = config is None and self.use_search
        if used_tools:
            config = types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())]
            )

        try:
            try:
                response = self._client.models.generate_content(
                    model=self.model, contents=prompt, config=config
                )
            except errors.ClientError as e:
                if not used_tools or e.code not in TOOL_REJECTED_CODES:
                    raise
                logger.warning(f"Search tool rejected ({e.code}), retrying without tools")
                used_tools = False
                response = self._client.models.generate_content(
                    model=self.model, contents=prompt
                )
        except errors.APIError as e:
            logger.error(f"Gemini request failed: {e}")
            raise TransportError(f"Gemini: {e}", status_code=e.code) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise TransportError(f"Gemini: {e}") from e

        text = response.text or ""
        grounding = _grounding_chunks(response) if used_tools else []
        return text, grounding

    def search(self, location: str, services: Iterable[str] = DEFAULT_SERVICES) -> Tuple[ScanResult, List[Dict]]:
        """
        Ask for the frequencies of one location.

        Returns:
            The normalized result and the grounding sources the answer cited

        Raises:
            TransportError: The provider call failed
            ParseError: The answer held no JSON object
        """
        location = sanitize_location(location)
        services = list(services)[:MAX_SERVICES] or list(DEFAULT_SERVICES)
        logger.info(f"Gemini search for {location!r} ({', '.join(services)})")

        text, grounding = self._generate(
            SEARCH_PROMPT.format(location=location, services=", ".join(services))
        )
        data = extract_json(text)
        if data is None:
            raise ParseError(f"No JSON object in Gemini answer for {location}")

        result = _stamp_origin(ScanResult.from_dict(data, source=Source.AI))
        if not result.location_name:
            result.location_name = location
        logger.info(
            f"Gemini returned {len(result.agencies)} agencies, "
            f"{len(result.trunked_systems)} systems for {location!r}"
        )
        return result, grounding

    def plan_trip(self, start: str, end: str, services: Iterable[str] = DEFAULT_SERVICES) -> Tuple[TripResult, Dict[str, str], List[Dict]]:
        """
        Ask for the jurisdictions between two places, with data for each.

        Returns:
            The trip, a map of stop name to its ZIP code where one was given,
            and the grounding sources

        Raises:
            TransportError: The provider call failed
            ParseError: The answer held no JSON object
        """
        start = sanitize_location(start)
        end = sanitize_location(end)
        services = list(services)[:MAX_SERVICES] or list(DEFAULT_SERVICES)
        logger.info(f"Gemini trip plan {start!r} -> {end!r}")

        text, grounding = self._generate(
            TRIP_PROMPT.format(start=start, end=end, services=", ".join(services))
        )
        data = extract_json(text)
        if data is None:
            raise ParseError(f"No JSON object in Gemini trip answer for {start} -> {end}")

        trip = TripResult.from_dict(data, source=Source.AI)
        trip.start_location = trip.start_location or start
        trip.end_location = trip.end_location or end

        stop_zips = {}
        raw_locations = data.get('locations') if isinstance(data.get('locations'), list) else []
        for raw in raw_locations:
            if isinstance(raw, dict) and is_zipcode(str(raw.get('zipcode') or "")):
                stop_zips[str(raw.get('locationName') or "Unknown")] = raw['zipcode']

        for stop in trip.locations:
            _stamp_origin(stop.data)
            if not stop.data.location_name:
                stop.data.location_name = stop.location_name

        logger.info(f"Gemini trip plan has {len(trip.locations)} stops")
        return trip, stop_zips, grounding

    def resolve_location(self, query: str) -> RegionInfo:
        """
        Resolve free text ("St George") to a county with its ZIP codes.

        Raises:
            TransportError: The provider call failed
            ParseError: The answer was not a usable resolution
        """
        query = sanitize_location(query)
        text, _ = self._generate(
            RESOLVE_PROMPT.format(query=query),
            config=types.GenerateContentConfig(response_mime_type="application/json"),
        )
        data = extract_json(text)
        if not data or not data.get('standardizedName') or not isinstance(data.get('zips'), list):
            raise ParseError(f"Invalid location resolution for {query!r}")

        zips = [str(z) for z in data['zips'] if is_zipcode(str(z))]
        primary = str(data.get('primaryZip') or "")
        if not is_zipcode(primary):
            primary = zips[0] if zips else None

        return RegionInfo(
            name=str(data['standardizedName']),
            zipcode=primary,
            zips=zips,
        )

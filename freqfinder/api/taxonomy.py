"""
Mapping between user-facing service categories and database tag ids.

The database tags every frequency and talkgroup with numeric ids
("Law Dispatch" = 1, ...). Callers ask for broader service categories
("Police"), so both directions are needed, plus a text-based fallback for
records that carry no usable tags.
"""

from enum import Enum, IntEnum
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Tuple


class ServiceType(str, Enum):
    POLICE = "Police"
    FIRE = "Fire"
    EMS = "EMS"
    FEDERAL = "Federal"
    PUBLIC_WORKS = "Public Works"
    HAM_RADIO = "Ham Radio"
    RAILROAD = "Railroad"
    AIR = "Air"
    MARINE = "Marine"
    UTILITIES = "Utilities"
    MILITARY = "Military"
    TRANSPORTATION = "Transportation"
    BUSINESS = "Business"
    HOSPITALS = "Hospitals"
    SCHOOLS = "Schools"
    CORRECTIONS = "Corrections"
    SECURITY = "Security"
    MULTI_DISPATCH = "Multi-Dispatch"

    @classmethod
    def lookup(cls, name: str) -> Optional["ServiceType"]:
        """Case-insensitive lookup; ``"Hospital"`` is accepted for Hospitals."""
        key = (name or "").strip().lower()
        if key == "hospital":
            return cls.HOSPITALS
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


ALL_SERVICES: Tuple[str, ...] = tuple(member.value for member in ServiceType)


class Tag(IntEnum):
    LAW_DISPATCH = 1
    LAW_TALK = 2
    LAW_TACTICAL = 3
    FIRE_DISPATCH = 4
    FIRE_TALK = 5
    FIRE_TACTICAL = 6
    EMS_DISPATCH = 7
    EMS_TALK = 8
    EMS_TACTICAL = 9
    HOSPITAL = 10
    HAM = 11
    PUBLIC_WORKS = 12
    TRANSPORTATION = 14
    MILITARY = 15
    FEDERAL = 16
    CORRECTIONS = 18
    SCHOOLS = 20
    SECURITY = 21
    UTILITIES = 22
    AIR = 23
    RAILROAD = 25
    MARINE = 26
    BUSINESS = 29
    MULTI_DISPATCH = 30


TAG_NAMES: Mapping[int, str] = MappingProxyType({
    Tag.LAW_DISPATCH: "Law Dispatch",
    Tag.LAW_TALK: "Law Talk",
    Tag.LAW_TACTICAL: "Law Tactical",
    Tag.FIRE_DISPATCH: "Fire Dispatch",
    Tag.FIRE_TALK: "Fire Talk",
    Tag.FIRE_TACTICAL: "Fire Tactical",
    Tag.EMS_DISPATCH: "EMS Dispatch",
    Tag.EMS_TALK: "EMS Talk",
    Tag.EMS_TACTICAL: "EMS Tactical",
    Tag.HOSPITAL: "Hospital",
    Tag.HAM: "Ham",
    Tag.PUBLIC_WORKS: "Public Works",
    Tag.TRANSPORTATION: "Transportation",
    Tag.MILITARY: "Military",
    Tag.FEDERAL: "Federal",
    Tag.CORRECTIONS: "Corrections",
    Tag.SCHOOLS: "Schools",
    Tag.SECURITY: "Security",
    Tag.UTILITIES: "Utilities",
    Tag.AIR: "Air",
    Tag.RAILROAD: "Railroad",
    Tag.MARINE: "Marine",
    Tag.BUSINESS: "Business",
    Tag.MULTI_DISPATCH: "Multi-Dispatch",
})

TAG_IDS: Mapping[str, int] = MappingProxyType(
    {name: int(tag_id) for tag_id, name in TAG_NAMES.items()}
)

SERVICE_TAGS: Mapping[ServiceType, FrozenSet[int]] = MappingProxyType({
    ServiceType.POLICE: frozenset({Tag.LAW_DISPATCH, Tag.LAW_TALK, Tag.LAW_TACTICAL}),
    ServiceType.FIRE: frozenset({Tag.FIRE_DISPATCH, Tag.FIRE_TALK, Tag.FIRE_TACTICAL}),
    ServiceType.EMS: frozenset({Tag.EMS_DISPATCH, Tag.EMS_TALK, Tag.EMS_TACTICAL}),
    ServiceType.HOSPITALS: frozenset({Tag.HOSPITAL}),
    ServiceType.HAM_RADIO: frozenset({Tag.HAM}),
    ServiceType.PUBLIC_WORKS: frozenset({Tag.PUBLIC_WORKS}),
    ServiceType.TRANSPORTATION: frozenset({Tag.TRANSPORTATION}),
    ServiceType.MILITARY: frozenset({Tag.MILITARY}),
    ServiceType.FEDERAL: frozenset({Tag.FEDERAL}),
    ServiceType.CORRECTIONS: frozenset({Tag.CORRECTIONS}),
    ServiceType.SCHOOLS: frozenset({Tag.SCHOOLS}),
    ServiceType.SECURITY: frozenset({Tag.SECURITY}),
    ServiceType.UTILITIES: frozenset({Tag.UTILITIES}),
    ServiceType.AIR: frozenset({Tag.AIR}),
    ServiceType.RAILROAD: frozenset({Tag.RAILROAD}),
    ServiceType.MARINE: frozenset({Tag.MARINE}),
    ServiceType.BUSINESS: frozenset({Tag.BUSINESS}),
    ServiceType.MULTI_DISPATCH: frozenset({Tag.MULTI_DISPATCH}),
})

# Added to every filtered request so less obvious traffic still shows up.
ALWAYS_INCLUDED_TAGS: FrozenSet[int] = frozenset({Tag.MILITARY, Tag.FEDERAL, Tag.RAILROAD})

# Selecting more categories than this means "fetch everything".
FETCH_ALL_THRESHOLD = 12

# Ordered; first match wins.
CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("police", "sheriff", "law"), "Police"),
    (("fire", "rescue"), "Fire"),
    (("ems", "medic", "ambulance"), "EMS"),
    (("federal",), "Federal"),
    (("military",), "Military"),
    (("air", "aviation"), "Air"),
    (("marine",), "Marine"),
    (("railroad", "rail"), "Railroad"),
    (("ham", "amateur"), "Ham Radio"),
    (("public works",), "Public Works"),
    (("utility", "utilities"), "Utilities"),
    (("transport",), "Transportation"),
    (("hospital",), "Hospitals"),
    (("school",), "Schools"),
    (("correction", "prison", "jail"), "Corrections"),
    (("security",), "Security"),
    (("business",), "Business"),
)


def tag_ids_for_service(service: str) -> FrozenSet[int]:
    member = ServiceType.lookup(service)
    if member is None:
        return frozenset()
    return SERVICE_TAGS.get(member, frozenset())


def tag_name(tag_id) -> str:
    """Display name for a tag id; ``"Other"`` when unknown."""
    try:
        return TAG_NAMES.get(int(tag_id), "Other")
    except (TypeError, ValueError):
        return "Other"


def relevant_tag_ids(services: Iterable[str]) -> FrozenSet[int]:
    """
    Tag ids to keep for a set of requested services.

    An empty set means "keep everything"; that is returned when more than
    ``FETCH_ALL_THRESHOLD`` services are selected so data whose tag is not
    covered by the table is not silently hidden.
    """
    services = list(services)
    if len(services) > FETCH_ALL_THRESHOLD:
        return frozenset()

    tags = set(ALWAYS_INCLUDED_TAGS)
    for service in services:
        tags.update(tag_ids_for_service(service))
    return frozenset(tags)


def infer_category(category_name: str, subcategory_name: str = "") -> str:
    """Guess a service category from database category/subcategory names."""
    combined = f"{category_name or ''} {subcategory_name or ''}".lower()
    for keywords, category in CATEGORY_RULES:
        if any(keyword in combined for keyword in keywords):
            return category
    return category_name or "Other"


# Keyword lists used when projecting a result down to requested services.
SERVICE_KEYWORDS: Mapping[ServiceType, Tuple[str, ...]] = MappingProxyType({
    ServiceType.POLICE: (
        "law", "police", "sheriff", "patrol", "trooper", "marshal", "constable",
        "detective", "fbi", "dea", "atf",
    ),
    ServiceType.FIRE: ("fire", "rescue", "engine", "ladder", "battalion", "hazmat"),
    ServiceType.EMS: (
        "ems", "medic", "ambulance", "hospital", "paramedic", "life flight", "rescue",
    ),
    ServiceType.HAM_RADIO: ("ham", "amateur", "repeater", "ares", "races", "skywarn"),
    ServiceType.RAILROAD: (
        "rail", "train", "locomotive", "yard", "conductor", "union pacific", "bnsf",
        "csx", "amtrak",
    ),
    ServiceType.AIR: (
        "air", "aviation", "control tower", "approach", "departure", "ground",
        "unicom", "airport", "pilot",
    ),
    ServiceType.MARINE: (
        "marine", "coast", "boat", "ship", "vessel", "port", "harbor", "marina",
    ),
    ServiceType.FEDERAL: (
        "federal", "fed", "govt", "government", "us ", "u.s.", "forest service",
        "park service", "blm", "fbi", "tsa", "customs", "border patrol", "ice ", "dhs",
    ),
    ServiceType.MILITARY: (
        "military", "army", "navy", "air force", "marines", "coast guard",
        "national guard", "base", "fort", "camp ", "afb", "defense", "squadron", "wing",
    ),
    ServiceType.PUBLIC_WORKS: (
        "public works", "dpw", "street", "road", "highway", "transportation", "dot ",
        "sanitation", "garbage", "trash", "recycling", "water", "sewer", "utility",
        "engineering", "maintenance",
    ),
    ServiceType.UTILITIES: (
        "utilit", "power", "electric", "gas", "energy", "water", "sewer", "cable",
        "internet", "phone",
    ),
    ServiceType.TRANSPORTATION: (
        "transport", "transit", "bus", "taxi", "shuttle", "metro", "subway",
        "airport", "uber", "lyft", "limo",
    ),
    ServiceType.BUSINESS: (
        "business", "commercial", "mall", "store", "shop", "factory", "plant",
        "warehouse", "hotel", "motel", "casino", "resort", "logistics", "security",
    ),
    ServiceType.HOSPITALS: (
        "hospital", "medical", "clinic", "center", "health", "care", "nursing",
        "trauma", "er ", "emergency room",
    ),
    ServiceType.SCHOOLS: (
        "school", "university", "college", "campus", "district", "education",
        "academy", "student", "faculty", "bus barn",
    ),
    ServiceType.CORRECTIONS: (
        "correction", "prison", "jail", "detention", "penitentiary", "warden",
        "inmate", "justice center",
    ),
    ServiceType.SECURITY: (
        "security", "patrol", "guard", "protection", "loss prevention", "safety",
    ),
    ServiceType.MULTI_DISPATCH: ("dispatch", "communication", "911", "center", "interop"),
})

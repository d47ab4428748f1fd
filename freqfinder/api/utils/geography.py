"""
US state identifiers and the ZIP-prefix-to-state table.

State ids are the ones the database uses in its ``stid`` fields (FIPS codes).
"""

from typing import Dict, Optional, Tuple

# abbreviation -> (state id, name)
STATES: Dict[str, Tuple[int, str]] = {
    'AL': (1, 'Alabama'),
    'AK': (2, 'Alaska'),
    'AZ': (4, 'Arizona'),
    'AR': (5, 'Arkansas'),
    'CA': (6, 'California'),
    'CO': (8, 'Colorado'),
    'CT': (9, 'Connecticut'),
    'DE': (10, 'Delaware'),
    'DC': (11, 'District of Columbia'),
    'FL': (12, 'Florida'),
    'GA': (13, 'Georgia'),
    'HI': (15, 'Hawaii'),
    'ID': (16, 'Idaho'),
    'IL': (17, 'Illinois'),
    'IN': (18, 'Indiana'),
    'IA': (19, 'Iowa'),
    'KS': (20, 'Kansas'),
    'KY': (21, 'Kentucky'),
    'LA': (22, 'Louisiana'),
    'ME': (23, 'Maine'),
    'MD': (24, 'Maryland'),
    'MA': (25, 'Massachusetts'),
    'MI': (26, 'Michigan'),
    'MN': (27, 'Minnesota'),
    'MS': (28, 'Mississippi'),
    'MO': (29, 'Missouri'),
    'MT': (30, 'Montana'),
    'NE': (31, 'Nebraska'),
    'NV': (32, 'Nevada'),
    'NH': (33, 'New Hampshire'),
    'NJ': (34, 'New Jersey'),
    'NM': (35, 'New Mexico'),
    'NY': (36, 'New York'),
    'NC': (37, 'North Carolina'),
    'ND': (38, 'North Dakota'),
    'OH': (39, 'Ohio'),
    'OK': (40, 'Oklahoma'),
    'OR': (41, 'Oregon'),
    'PA': (42, 'Pennsylvania'),
    'RI': (44, 'Rhode Island'),
    'SC': (45, 'South Carolina'),
    'SD': (46, 'South Dakota'),
    'TN': (47, 'Tennessee'),
    'TX': (48, 'Texas'),
    'UT': (49, 'Utah'),
    'VT': (50, 'Vermont'),
    'VA': (51, 'Virginia'),
    'WA': (53, 'Washington'),
    'WV': (54, 'West Virginia'),
    'WI': (55, 'Wisconsin'),
    'WY': (56, 'Wyoming'),
}

_ABBR_BY_ID = {str(state_id): abbr for abbr, (state_id, _) in STATES.items()}

# Single-prefix exceptions to the ranges below; checked first.
ZIP3_EXCEPTIONS: Dict[int, str] = {
    5: 'NY',    # Holtsville IRS
    55: 'MA',   # Andover IRS, inside the Vermont block
    201: 'VA',  # Dulles, inside the DC block
    569: 'DC',  # parcel return, inside the Dakota blocks
    733: 'TX',  # Austin IRS, inside the Oklahoma block
    885: 'TX',  # El Paso, inside the New Mexico block
    830: 'WY',  # Wyoming/Idaho split of the 83x block
    831: 'WY',
}

# (first, last, state) over 3-digit ZIP prefixes.
ZIP3_RANGES: Tuple[Tuple[int, int, str], ...] = (
    (10, 27, 'MA'),
    (28, 29, 'RI'),
    (30, 38, 'NH'),
    (39, 49, 'ME'),
    (50, 59, 'VT'),
    (60, 69, 'CT'),
    (70, 89, 'NJ'),
    (100, 149, 'NY'),
    (150, 196, 'PA'),
    (197, 199, 'DE'),
    (200, 205, 'DC'),
    (206, 219, 'MD'),
    (220, 246, 'VA'),
    (247, 268, 'WV'),
    (270, 289, 'NC'),
    (290, 299, 'SC'),
    (300, 319, 'GA'),
    (320, 349, 'FL'),
    (350, 369, 'AL'),
    (370, 385, 'TN'),
    (386, 397, 'MS'),
    (398, 399, 'GA'),
    (400, 427, 'KY'),
    (430, 459, 'OH'),
    (460, 479, 'IN'),
    (480, 499, 'MI'),
    (500, 528, 'IA'),
    (530, 549, 'WI'),
    (550, 567, 'MN'),
    (570, 577, 'SD'),
    (580, 588, 'ND'),
    (590, 599, 'MT'),
    (600, 629, 'IL'),
    (630, 658, 'MO'),
    (660, 679, 'KS'),
    (680, 693, 'NE'),
    (700, 714, 'LA'),
    (716, 729, 'AR'),
    (730, 749, 'OK'),
    (750, 799, 'TX'),
    (800, 816, 'CO'),
    (820, 831, 'WY'),
    (832, 838, 'ID'),
    (840, 847, 'UT'),
    (850, 865, 'AZ'),
    (870, 884, 'NM'),
    (889, 898, 'NV'),
    (900, 961, 'CA'),
    (967, 968, 'HI'),
    (970, 979, 'OR'),
    (980, 994, 'WA'),
    (995, 999, 'AK'),
)


def expected_state(zipcode: str) -> Optional[str]:
    """
    Get the state a ZIP code belongs to from its 3-digit prefix.

    Returns:
        Two-letter abbreviation, or ``None`` for territories, military
        prefixes and anything unparseable.
    """
    if not zipcode or len(zipcode) < 3 or not zipcode[:3].isdigit():
        return None
    prefix = int(zipcode[:3])

    if prefix in ZIP3_EXCEPTIONS:
        return ZIP3_EXCEPTIONS[prefix]
    for first, last, abbr in ZIP3_RANGES:
        if first <= prefix <= last:
            return abbr
    return None


def expected_state_id(zipcode: str) -> Optional[str]:
    abbr = expected_state(zipcode)
    if abbr is None:
        return None
    return str(STATES[abbr][0])


def state_abbr(state_id) -> str:
    """Map a database state id to its abbreviation, or echo the id back."""
    return _ABBR_BY_ID.get(str(state_id), str(state_id))

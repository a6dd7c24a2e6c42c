"""METAR code tables: weather phenomena, descriptors and cloud groups."""

# Precipitation reduces visibility and is preferred as the visibility cause.
PRECIPITATION = {
    'DZ': 'drizzle',
    'RA': 'rain',
    'SN': 'snow',
    'SG': 'snow grains',
    'IC': 'ice crystals',
    'PL': 'ice pellets',
    'GR': 'hail',
    'GS': 'small hail',
    'UP': 'unknown precipitation',
}

OBSCURATION = {
    'BR': 'mist',
    'FG': 'fog',
    'FU': 'smoke',
    'VA': 'volcanic ash',
    'DU': 'dust',
    'SA': 'sand',
    'HZ': 'haze',
    'PY': 'spray',
    'SS': 'sandstorm',
    'DS': 'duststorm',
}

OTHER = {
    'PO': 'dust whirls',
    'SQ': 'squalls',
    'FC': 'funnel cloud',
}

PHENOMENA = {**PRECIPITATION, **OBSCURATION, **OTHER}

# SH and TS build their own phrasing and may stand alone; the rest need a phenomenon.
DESCRIPTORS = {
    'MI': 'shallow',
    'BC': 'patches of',
    'PR': 'partial',
    'DR': 'low drifting',
    'BL': 'blowing',
    'SH': 'showers',
    'TS': 'thunderstorm',
    'FZ': 'freezing',
}

INTENSITY = {
    '-': 'light',
    '+': 'heavy',
}

VICINITY = 'VC'
RECENT = 'RE'

CLOUD_COVER_CODES = {
    'FEW': 'few',
    'SCT': 'scattered',
    'BKN': 'broken',
    'OVC': 'overcast',
    'SKC': 'clear',
    'CLR': 'clear',
    'NSC': 'insignificant',
    'NCD': 'none',
}

CLOUD_TYPE_CODES = {
    'CB': 'cumulonimbus',
    'TCU': 'towering-cumulus',
}

RVR_TRENDS = {
    'U': 'improving',
    'D': 'deteriorating',
    'N': 'no-change',
}

COMPASS_POINTS = [
    'N', 'NNE', 'NE', 'ENE', 'E', 'ESE', 'SE', 'SSE',
    'S', 'SSW', 'SW', 'WSW', 'W', 'WNW', 'NW', 'NNW',
]


def describe_phenomenon(descriptor, codes, intensity='', vicinity=False, recent=False):
    """
    Build a human readable description for one weather group.

    Args:
        descriptor: Descriptor code (e.g. 'SH', 'FZ') or empty string
        codes: List of two-letter phenomenon codes, in source order
        intensity: '-', '+' or empty string
        vicinity: True for VC groups
        recent: True for RE groups

    Returns:
        Description such as "Light rain showers" or "Fog in the vicinity"
    """
    names = " and ".join(PHENOMENA[code] for code in codes)

    if descriptor == 'SH':
        text = f"{names} showers" if names else "showers"
    elif descriptor == 'TS':
        text = f"thunderstorm with {names}" if names else "thunderstorm"
    elif descriptor:
        text = f"{DESCRIPTORS[descriptor]} {names}"
    else:
        text = names

    if intensity:
        text = f"{INTENSITY[intensity]} {text}"
    if recent:
        text = f"recent {text}"
    if vicinity:
        text = f"{text} in the vicinity"

    return text[0].upper() + text[1:]

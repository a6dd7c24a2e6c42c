"""METAR decoder: ordered group rules feeding a per-call decode state."""

import re
import logging
from typing import List, Optional

from airfield_wx.weather.analysis import round_half_up
from airfield_wx.weather.models import (
    DecodedReport,
    ReportType,
    Wind,
    CloudLayer,
    CloudCover,
    CloudType,
    RunwayVisualRange,
    RvrTrend,
    Pressure,
    PressureUnit,
    VISIBILITY_UNLIMITED,
)
from airfield_wx.weather.phenomena import (
    PHENOMENA,
    PRECIPITATION,
    OBSCURATION,
    DESCRIPTORS,
    VICINITY,
    RECENT,
    CLOUD_TYPE_CODES,
    RVR_TRENDS,
    describe_phenomenon,
)

logger = logging.getLogger(__name__)

# Meters per second to knots
MPS_TO_KNOTS = 1.944

# Four-letter words that can sit where the station is expected
_NOT_STATIONS = {"AUTO"}

_REPORT_TYPE_RE = re.compile(r'^(METAR|SPECI)$')
_CORRECTION_RE = re.compile(r'^COR$')
_STATION_RE = re.compile(r'^[A-Z]{4}$')
_TIME_RE = re.compile(r'^\d{6}Z$')
_WIND_RE = re.compile(r'^(VRB|\d{3})(\d{2,3})(?:G(\d{2,3}))?(KT|MPS)$')
_WIND_VARIATION_RE = re.compile(r'^(\d{3})V(\d{3})$')
_CAVOK_RE = re.compile(r'^CAVOK$')
_VISIBILITY_RE = re.compile(r'^(\d{4})$')
_RVR_RE = re.compile(r'^R(\d{2}[LCR]?)/([PM])?(\d{4})(?:V([PM])?(\d{4}))?/?([UDN])?$')
_WEATHER_RE = re.compile(
    r'^(?P<intensity>[+-])?'
    r'(?P<qualifier>' + VICINITY + '|' + RECENT + r')?'
    r'(?P<descriptor>' + '|'.join(DESCRIPTORS) + r')?'
    r'(?P<codes>(?:' + '|'.join(PHENOMENA) + r')*)$'
)
_VERTICAL_VISIBILITY_RE = re.compile(r'^VV(\d{3})$')
_CLOUD_RE = re.compile(r'^(FEW|SCT|BKN|OVC|SKC|CLR|NSC|NCD)(\d{3})?(CB|TCU|///)?$')
_TEMPERATURE_RE = re.compile(r'^(M?\d{1,2})/(M?\d{1,2})$')
_PRESSURE_HPA_RE = re.compile(r'^Q(\d{4})$')
_PRESSURE_INHG_RE = re.compile(r'^A(\d{4})$')


class _DecodeState:
    """Mutable accumulator for a single decode call."""

    def __init__(self):
        self.report_type = ReportType.METAR
        self.station = ""
        # Last token index the station group may occupy
        self.station_index = 1
        self.observation_time = ""
        self.wind: Optional[dict] = None
        self.visibility_meters = VISIBILITY_UNLIMITED
        self.cavok = False
        self.visibility_cause: Optional[str] = None
        self.cause_from_precipitation = False
        self.vertical_visibility_ft: Optional[int] = None
        self.runway_visual_range: List[RunwayVisualRange] = []
        self.clouds: List[CloudLayer] = []
        self.temperature: Optional[int] = None
        self.dewpoint: Optional[int] = None
        self.pressure: Optional[Pressure] = None
        self.conditions: List[str] = []
        self.matched_groups = 0

    def build(self, raw_text: str) -> DecodedReport:
        """Freeze the accumulated state into a DecodedReport."""
        return DecodedReport(
            raw_text=raw_text,
            report_type=self.report_type,
            station=self.station,
            observation_time=self.observation_time,
            wind=Wind(**self.wind) if self.wind else None,
            visibility_meters=self.visibility_meters,
            cavok=self.cavok,
            visibility_cause=self.visibility_cause,
            vertical_visibility_ft=self.vertical_visibility_ft,
            runway_visual_range=tuple(self.runway_visual_range),
            clouds=tuple(self.clouds),
            temperature_celsius=self.temperature,
            dewpoint_celsius=self.dewpoint,
            pressure=self.pressure,
            conditions=tuple(self.conditions),
            matched_groups=self.matched_groups,
        )


# --- Group handlers ---
#
# Each handler receives the decode state, the regex match and the token
# position. Returning False declines the token so later rules may try it.


def _handle_report_type(state: _DecodeState, match, index: int) -> bool:
    if index != 0:
        return False
    state.report_type = ReportType(match.group(1))
    return True


def _handle_correction(state: _DecodeState, match, index: int) -> bool:
    # COR directly after the report type (or leading) shifts the station one group
    if index > 1 or state.station or state.station_index > 1:
        return False
    state.station_index += 1
    return True


def _handle_station(state: _DecodeState, match, index: int) -> bool:
    if index > state.station_index or state.station or match.group(0) in _NOT_STATIONS:
        return False
    state.station = match.group(0)
    return True


def _handle_time(state: _DecodeState, match, index: int) -> bool:
    if state.observation_time:
        return False
    state.observation_time = match.group(0)
    return True


def _to_knots(value: int, unit: str) -> int:
    if unit == 'MPS':
        return round_half_up(value * MPS_TO_KNOTS)
    return value


def _handle_wind(state: _DecodeState, match, index: int) -> bool:
    if state.wind is not None:
        return False

    raw_direction, raw_speed, raw_gust, unit = match.groups()
    if raw_direction == 'VRB':
        direction = 'VRB'
    else:
        direction = int(raw_direction)
        if direction > 360:
            return False

    speed = _to_knots(int(raw_speed), unit)
    gust = _to_knots(int(raw_gust), unit) if raw_gust else None
    if gust is not None and gust <= speed:
        gust = None

    state.wind = {
        'direction': direction,
        'speed_knots': speed,
        'gust_knots': gust,
    }
    return True


def _handle_wind_variation(state: _DecodeState, match, index: int) -> bool:
    if state.wind is None or 'variable_from' in state.wind:
        return False
    state.wind['variable_from'] = int(match.group(1))
    state.wind['variable_to'] = int(match.group(2))
    return True


def _handle_cavok(state: _DecodeState, match, index: int) -> bool:
    state.cavok = True
    state.visibility_meters = VISIBILITY_UNLIMITED
    return True


def _handle_visibility(state: _DecodeState, match, index: int) -> bool:
    # A later visibility group replaces an earlier CAVOK
    state.cavok = False
    state.visibility_meters = int(match.group(1))
    return True


def _handle_rvr(state: _DecodeState, match, index: int) -> bool:
    runway, _, visibility, _, variable_max, trend = match.groups()
    state.runway_visual_range.append(RunwayVisualRange(
        runway=runway,
        visibility_meters=int(visibility),
        variable_max=int(variable_max) if variable_max else None,
        trend=RvrTrend(RVR_TRENDS[trend]) if trend else None,
    ))
    return True


def _handle_weather(state: _DecodeState, match, index: int) -> bool:
    descriptor = match.group('descriptor') or ''
    codes = re.findall('..', match.group('codes'))
    if not codes and descriptor not in ('SH', 'TS'):
        return False

    qualifier = match.group('qualifier')
    description = describe_phenomenon(
        descriptor,
        codes,
        intensity=match.group('intensity') or '',
        vicinity=qualifier == VICINITY,
        recent=qualifier == RECENT,
    )
    if description not in state.conditions:
        state.conditions.append(description)

    # Only phenomena at the station explain the reported visibility
    if qualifier:
        return True

    cause = description.lower()
    if any(code in PRECIPITATION for code in codes):
        if state.visibility_cause is None or not state.cause_from_precipitation:
            state.visibility_cause = cause
            state.cause_from_precipitation = True
    elif any(code in OBSCURATION for code in codes):
        if state.visibility_cause is None:
            state.visibility_cause = cause
    return True


def _handle_vertical_visibility(state: _DecodeState, match, index: int) -> bool:
    state.vertical_visibility_ft = int(match.group(1)) * 100
    return True


def _handle_cloud(state: _DecodeState, match, index: int) -> bool:
    code, height, cloud_type = match.groups()
    type_name = CLOUD_TYPE_CODES.get(cloud_type) if cloud_type else None
    state.clouds.append(CloudLayer(
        cover=CloudCover.from_code(code),
        altitude_feet=int(height) * 100 if height else 0,
        type=CloudType(type_name) if type_name else None,
        code=code,
        height_reported=height is not None,
    ))
    return True


def _parse_signed(value: str) -> int:
    """Parse a temperature where a leading M means minus."""
    if value.startswith('M'):
        return -int(value[1:])
    return int(value)


def _handle_temperature(state: _DecodeState, match, index: int) -> bool:
    if state.temperature is not None:
        return False
    state.temperature = _parse_signed(match.group(1))
    state.dewpoint = _parse_signed(match.group(2))
    return True


def _handle_pressure_hpa(state: _DecodeState, match, index: int) -> bool:
    if state.pressure is not None:
        return False
    state.pressure = Pressure(int(match.group(1)), PressureUnit.HECTOPASCAL)
    return True


def _handle_pressure_inhg(state: _DecodeState, match, index: int) -> bool:
    if state.pressure is not None:
        return False
    state.pressure = Pressure(int(match.group(1)) / 100, PressureUnit.INCHES_HG)
    return True


# Evaluated in order for every token; the first accepting rule wins.
# Specific patterns come before general ones (e.g. time and wind before
# the four-digit visibility group).
_RULES = (
    (_REPORT_TYPE_RE, _handle_report_type),
    (_CORRECTION_RE, _handle_correction),
    (_STATION_RE, _handle_station),
    (_TIME_RE, _handle_time),
    (_WIND_RE, _handle_wind),
    (_WIND_VARIATION_RE, _handle_wind_variation),
    (_CAVOK_RE, _handle_cavok),
    (_VISIBILITY_RE, _handle_visibility),
    (_RVR_RE, _handle_rvr),
    (_WEATHER_RE, _handle_weather),
    (_VERTICAL_VISIBILITY_RE, _handle_vertical_visibility),
    (_CLOUD_RE, _handle_cloud),
    (_TEMPERATURE_RE, _handle_temperature),
    (_PRESSURE_HPA_RE, _handle_pressure_hpa),
    (_PRESSURE_INHG_RE, _handle_pressure_inhg),
)


class MetarParser:
    """
    Decode raw METAR text into DecodedReport objects.

    Decoding is lenient: groups that match no rule are skipped, so a
    partial or slightly malformed report still yields whatever could be
    recognised. Nothing is shared between calls.

    Example:
        report = MetarParser.decode(
            "ESMK 171350Z 24012G18KT 9999 FEW040 SCT080 12/05 Q1018"
        )
        print(report.flight_category)  # FlightCategory.VFR
    """

    @staticmethod
    def tokenize(raw_text: str) -> List[str]:
        """Split raw text into whitespace separated groups."""
        if not raw_text:
            return []
        return raw_text.split()

    @classmethod
    def decode(cls, raw_text: str) -> DecodedReport:
        """
        Decode a METAR string.

        Args:
            raw_text: Raw METAR text (may include "METAR" or "SPECI" prefix)

        Returns:
            DecodedReport; fields not present in the text keep their defaults
        """
        text = (raw_text or "").strip()
        state = _DecodeState()

        for index, token in enumerate(cls.tokenize(text)):
            if cls._classify(state, token, index):
                state.matched_groups += 1
            else:
                logger.debug("Ignoring unrecognised METAR group %r", token)

        return state.build(text)

    @staticmethod
    def _classify(state: _DecodeState, token: str, index: int) -> bool:
        for pattern, handler in _RULES:
            match = pattern.match(token)
            if match and handler(state, match, index):
                return True
        return False


def tokenize(raw_text: str) -> List[str]:
    """Split raw METAR text into groups."""
    return MetarParser.tokenize(raw_text)


def decode(raw_text: str) -> DecodedReport:
    """Decode raw METAR text. See MetarParser.decode."""
    return MetarParser.decode(raw_text)

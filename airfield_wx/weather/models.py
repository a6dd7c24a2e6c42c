"""Decoded METAR data models."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any

from dateutil.relativedelta import relativedelta

_OBSERVATION_TIME_RE = re.compile(r'^(\d{2})(\d{2})(\d{2})Z$')

# 1 inch of mercury in hectopascals
_INHG_TO_HPA = 33.8639

VISIBILITY_UNLIMITED = 9999


class FlightCategory(Enum):
    """
    Flight category based on ceiling and visibility.

    Ordered from worst to best: LIFR < IFR < MVFR < VFR.

    Thresholds (first match wins, strict less-than):
        LIFR:  visibility < 1600 m  or  ceiling < 500 ft
        IFR:   visibility < 5000 m  or  ceiling < 1000 ft
        MVFR:  visibility < 8000 m  or  ceiling < 3000 ft
        VFR:   otherwise
    """

    LIFR = "LIFR"
    IFR = "IFR"
    MVFR = "MVFR"
    VFR = "VFR"

    @property
    def order(self) -> int:
        """Numeric ordering from worst (0) to best (3)."""
        return _CATEGORY_ORDER[self]

    def __lt__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order < other.order

    def __le__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order <= other.order

    def __gt__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order > other.order

    def __ge__(self, other: 'FlightCategory') -> bool:
        if not isinstance(other, FlightCategory):
            return NotImplemented
        return self.order >= other.order


_CATEGORY_ORDER = {
    FlightCategory.LIFR: 0,
    FlightCategory.IFR: 1,
    FlightCategory.MVFR: 2,
    FlightCategory.VFR: 3,
}


class ReportType(Enum):
    """Type of observation report."""

    METAR = "METAR"
    SPECI = "SPECI"


class CloudCover(Enum):
    """Cloud amount of a single layer."""

    FEW = "few"
    SCATTERED = "scattered"
    BROKEN = "broken"
    OVERCAST = "overcast"
    CLEAR = "clear"
    INSIGNIFICANT = "insignificant"
    NONE = "none"
    UNKNOWN = "unknown"

    @classmethod
    def from_code(cls, code: str) -> 'CloudCover':
        """Map a METAR cover code (FEW, BKN, ...) to a CloudCover."""
        from airfield_wx.weather.phenomena import CLOUD_COVER_CODES
        name = CLOUD_COVER_CODES.get(code)
        return cls(name) if name else cls.UNKNOWN

    @property
    def is_ceiling(self) -> bool:
        """Broken and overcast layers constitute a ceiling."""
        return self in (CloudCover.BROKEN, CloudCover.OVERCAST)


class CloudType(Enum):
    """Convective cloud type reported after a layer."""

    CUMULONIMBUS = "cumulonimbus"
    TOWERING_CUMULUS = "towering-cumulus"


class RvrTrend(Enum):
    """Runway visual range tendency."""

    IMPROVING = "improving"
    DETERIORATING = "deteriorating"
    NO_CHANGE = "no-change"


class PressureUnit(Enum):
    """Unit of the reported altimeter setting."""

    HECTOPASCAL = "hPa"
    INCHES_HG = "inHg"


def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Wind:
    """
    Surface wind, always in knots.

    Attributes:
        direction: Degrees true (0-360) or "VRB" for variable
        speed_knots: Mean speed
        gust_knots: Gust speed, only set when greater than the mean speed
        variable_from: Start of the variable direction sector
        variable_to: End of the variable direction sector
    """

    direction: Union[int, str]
    speed_knots: int
    gust_knots: Optional[int] = None
    variable_from: Optional[int] = None
    variable_to: Optional[int] = None

    @property
    def is_variable(self) -> bool:
        return self.direction == "VRB"

    @property
    def is_calm(self) -> bool:
        return self.speed_knots == 0 and not self.gust_knots

    @property
    def direction_name(self) -> str:
        """Compass point name, e.g. "WSW" or "Variable"."""
        from airfield_wx.weather.analysis import WeatherAnalyzer
        return WeatherAnalyzer.wind_direction_name(self.direction)

    def to_dict(self) -> dict:
        return {
            'direction': self.direction,
            'direction_name': self.direction_name,
            'speed_knots': self.speed_knots,
            'gust_knots': self.gust_knots,
            'variable_from': self.variable_from,
            'variable_to': self.variable_to,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Wind':
        return cls(
            direction=data.get('direction', 0),
            speed_knots=data.get('speed_knots', 0),
            gust_knots=data.get('gust_knots'),
            variable_from=data.get('variable_from'),
            variable_to=data.get('variable_to'),
        )


@dataclass(frozen=True)
class CloudLayer:
    """
    One cloud group.

    altitude_feet is 0 when the group carried no height (SKC, NSC, ...);
    height_reported tells such groups apart from a genuine surface layer.
    """

    cover: CloudCover
    altitude_feet: int
    type: Optional[CloudType] = None
    code: str = ""
    height_reported: bool = True

    def to_dict(self) -> dict:
        return {
            'cover': self.cover.value,
            'altitude_feet': self.altitude_feet,
            'type': self.type.value if self.type else None,
            'code': self.code,
            'height_reported': self.height_reported,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CloudLayer':
        cover = _enum_or_none(CloudCover, data.get('cover')) or CloudCover.UNKNOWN
        return cls(
            cover=cover,
            altitude_feet=data.get('altitude_feet', 0),
            type=_enum_or_none(CloudType, data.get('type')),
            code=data.get('code', ''),
            height_reported=data.get('height_reported', True),
        )


@dataclass(frozen=True)
class RunwayVisualRange:
    """Runway visual range for one runway, in meters."""

    runway: str
    visibility_meters: int
    variable_max: Optional[int] = None
    trend: Optional[RvrTrend] = None

    def to_dict(self) -> dict:
        return {
            'runway': self.runway,
            'visibility_meters': self.visibility_meters,
            'variable_max': self.variable_max,
            'trend': self.trend.value if self.trend else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RunwayVisualRange':
        return cls(
            runway=data.get('runway', ''),
            visibility_meters=data.get('visibility_meters', 0),
            variable_max=data.get('variable_max'),
            trend=_enum_or_none(RvrTrend, data.get('trend')),
        )


@dataclass(frozen=True)
class Pressure:
    """Altimeter setting (QNH) with its unit."""

    value: Union[int, float]
    unit: PressureUnit = PressureUnit.HECTOPASCAL

    @property
    def hectopascals(self) -> float:
        if self.unit == PressureUnit.INCHES_HG:
            return round(self.value * _INHG_TO_HPA, 1)
        return float(self.value)

    def to_dict(self) -> dict:
        return {'value': self.value, 'unit': self.unit.value}

    @classmethod
    def from_dict(cls, data: dict) -> 'Pressure':
        unit = _enum_or_none(PressureUnit, data.get('unit')) or PressureUnit.HECTOPASCAL
        return cls(value=data.get('value', 0), unit=unit)


@dataclass(frozen=True)
class DecodedReport:
    """
    Decoded METAR observation.

    Instances are built by airfield_wx.weather.parser.decode() and never
    modified afterwards. Ceiling and flight category are derived on access
    from the decoded fields.

    Attributes:
        raw_text: Stripped source text
        report_type: METAR or SPECI
        station: ICAO identifier, empty if absent
        observation_time: Raw DDHHMMZ token, empty if absent
        wind: Surface wind or None when no wind group was present
        visibility_meters: Prevailing visibility, 9999 meaning 10 km or more
        cavok: Ceiling and visibility OK was reported
        visibility_cause: Phenomenon reducing visibility (e.g. "fog")
        vertical_visibility_ft: Vertical visibility under total obscuration
        runway_visual_range: RVR groups in source order
        clouds: Cloud layers in source order
        temperature_celsius: Air temperature
        dewpoint_celsius: Dew point
        pressure: Altimeter setting
        conditions: Weather phenomenon descriptions in source order
        matched_groups: Number of source groups that were recognised
    """

    raw_text: str = ""
    report_type: ReportType = ReportType.METAR
    station: str = ""
    observation_time: str = ""
    wind: Optional[Wind] = None
    visibility_meters: int = VISIBILITY_UNLIMITED
    cavok: bool = False
    visibility_cause: Optional[str] = None
    vertical_visibility_ft: Optional[int] = None
    runway_visual_range: Tuple[RunwayVisualRange, ...] = field(default_factory=tuple)
    clouds: Tuple[CloudLayer, ...] = field(default_factory=tuple)
    temperature_celsius: Optional[int] = None
    dewpoint_celsius: Optional[int] = None
    pressure: Optional[Pressure] = None
    conditions: Tuple[str, ...] = field(default_factory=tuple)
    matched_groups: int = 0

    @property
    def has_data(self) -> bool:
        """False when nothing in the source text was recognised."""
        return self.matched_groups > 0

    @property
    def ceiling_ft(self) -> Optional[int]:
        from airfield_wx.weather.analysis import WeatherAnalyzer
        return WeatherAnalyzer.ceiling_ft(self)

    @property
    def flight_category(self) -> FlightCategory:
        from airfield_wx.weather.analysis import WeatherAnalyzer
        return WeatherAnalyzer.flight_category(self.visibility_meters, self.ceiling_ft)

    @property
    def visibility_display(self) -> str:
        """Visibility as shown on the display, e.g. "10+ km" or "800 m"."""
        if self.cavok:
            return "CAVOK"
        if self.visibility_meters >= VISIBILITY_UNLIMITED:
            return "10+ km"
        if self.visibility_meters >= 1000:
            return f"{self.visibility_meters / 1000:.1f} km"
        return f"{self.visibility_meters} m"

    def observation_datetime(self, reference: Optional[datetime] = None) -> Optional[datetime]:
        """
        Resolve the DDHHMMZ observation time to a UTC datetime.

        The month and year come from the reference instant. A day later
        than the reference day belongs to the previous month.

        Args:
            reference: Instant the report is interpreted against (default now)

        Returns:
            Aware UTC datetime, or None if absent or not a valid date
        """
        match = _OBSERVATION_TIME_RE.match(self.observation_time)
        if not match:
            return None

        day, hour, minute = (int(g) for g in match.groups())
        if hour > 23 or minute > 59:
            return None

        if reference is None:
            reference = datetime.now(timezone.utc)
        elif reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        else:
            reference = reference.astimezone(timezone.utc)

        month_start = reference.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if day > reference.day:
            month_start -= relativedelta(months=1)

        try:
            return month_start.replace(day=day, hour=hour, minute=minute)
        except ValueError:
            return None

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON export."""
        return {
            'raw_text': self.raw_text,
            'report_type': self.report_type.value,
            'station': self.station,
            'observation_time': self.observation_time,
            'wind': self.wind.to_dict() if self.wind else None,
            'visibility_meters': self.visibility_meters,
            'visibility_display': self.visibility_display,
            'cavok': self.cavok,
            'visibility_cause': self.visibility_cause,
            'vertical_visibility_ft': self.vertical_visibility_ft,
            'runway_visual_range': [r.to_dict() for r in self.runway_visual_range],
            'clouds': [c.to_dict() for c in self.clouds],
            'temperature_celsius': self.temperature_celsius,
            'dewpoint_celsius': self.dewpoint_celsius,
            'pressure': self.pressure.to_dict() if self.pressure else None,
            'conditions': list(self.conditions),
            'ceiling_ft': self.ceiling_ft,
            'flight_category': self.flight_category.value,
            'matched_groups': self.matched_groups,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DecodedReport':
        """Create DecodedReport from dictionary. Derived keys are ignored."""
        report_type = _enum_or_none(ReportType, data.get('report_type')) or ReportType.METAR

        wind = Wind.from_dict(data['wind']) if data.get('wind') else None
        pressure = Pressure.from_dict(data['pressure']) if data.get('pressure') else None

        return cls(
            raw_text=data.get('raw_text', ''),
            report_type=report_type,
            station=data.get('station', ''),
            observation_time=data.get('observation_time', ''),
            wind=wind,
            visibility_meters=data.get('visibility_meters', VISIBILITY_UNLIMITED),
            cavok=data.get('cavok', False),
            visibility_cause=data.get('visibility_cause'),
            vertical_visibility_ft=data.get('vertical_visibility_ft'),
            runway_visual_range=tuple(
                RunwayVisualRange.from_dict(r) for r in data.get('runway_visual_range', [])
            ),
            clouds=tuple(CloudLayer.from_dict(c) for c in data.get('clouds', [])),
            temperature_celsius=data.get('temperature_celsius'),
            dewpoint_celsius=data.get('dewpoint_celsius'),
            pressure=pressure,
            conditions=tuple(data.get('conditions', [])),
            matched_groups=data.get('matched_groups', 0),
        )

    def __repr__(self) -> str:
        station = self.station or "????"
        return f"DecodedReport({self.report_type.value} {station} {self.flight_category.value})"


@dataclass
class WeatherSnapshot:
    """
    Current weather for one station as handed to the display layer.

    The TAF is passed through as raw text and never decoded.

    Attributes:
        station: ICAO identifier the snapshot was requested for
        metar: Decoded METAR, None if no METAR was available
        metar_raw: Raw METAR text
        taf_raw: Raw TAF text
        fetched_at: When the data was fetched (UTC)
        demo: True when built from demo data because the provider failed
    """

    station: str
    metar: Optional[DecodedReport] = None
    metar_raw: Optional[str] = None
    taf_raw: Optional[str] = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    demo: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'station': self.station,
            'metar': self.metar.to_dict() if self.metar else None,
            'metar_raw': self.metar_raw,
            'taf_raw': self.taf_raw,
            'fetched_at': self.fetched_at.isoformat(),
            'demo': self.demo,
        }

"""
Weather module for decoding METAR reports.

Provides:
- DecodedReport: Decoded METAR observation
- FlightCategory: VFR/MVFR/IFR/LIFR enum with ordering
- MetarParser / decode: Decode raw METAR text
- WeatherAnalyzer: Ceiling, flight category, wind direction naming
- WeatherSnapshot: Decoded METAR plus raw METAR/TAF for display

Example:
    from airfield_wx.weather import decode, FlightCategory

    report = decode("ESMK 171350Z 24012G18KT 9999 FEW040 SCT080 12/05 Q1018")
    print(report.flight_category)  # FlightCategory.VFR
    print(report.wind.direction_name)  # WSW
"""

from airfield_wx.weather.models import (
    DecodedReport,
    FlightCategory,
    ReportType,
    Wind,
    CloudLayer,
    CloudCover,
    CloudType,
    RunwayVisualRange,
    RvrTrend,
    Pressure,
    PressureUnit,
    WeatherSnapshot,
)
from airfield_wx.weather.parser import MetarParser, decode, tokenize
from airfield_wx.weather.analysis import WeatherAnalyzer

__all__ = [
    'DecodedReport',
    'FlightCategory',
    'ReportType',
    'Wind',
    'CloudLayer',
    'CloudCover',
    'CloudType',
    'RunwayVisualRange',
    'RvrTrend',
    'Pressure',
    'PressureUnit',
    'WeatherSnapshot',
    'MetarParser',
    'decode',
    'tokenize',
    'WeatherAnalyzer',
]

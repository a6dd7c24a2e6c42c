"""
Airfield weather kiosk library.

Decodes METAR reports for a single airfield display and fetches the raw
METAR/TAF text it needs.

The main public API includes:
- decode: Decode a raw METAR string into a DecodedReport
- DecodedReport: Decoded observation with derived flight category
- AvWxSource: Raw METAR/TAF fetcher for aviationweather.gov
"""

__version__ = '0.1.0'
__all__ = [
    'decode',
    'DecodedReport',
    'FlightCategory',
    'AvWxSource',
]

from airfield_wx.weather import decode, DecodedReport, FlightCategory
from airfield_wx.sources.avwx import AvWxSource

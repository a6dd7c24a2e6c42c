"""Weather analysis: ceiling, flight category, wind direction naming."""

import math
from typing import Optional, Union

from airfield_wx.weather.models import DecodedReport, FlightCategory
from airfield_wx.weather.phenomena import COMPASS_POINTS

# Ceiling used when no ceiling is reported
CEILING_UNLIMITED_FT = 99999


class WeatherAnalyzer:
    """
    Aviation weather analysis functions.

    All methods are static - pure functions with no state.
    """

    @staticmethod
    def ceiling_ft(report: DecodedReport) -> Optional[int]:
        """
        Determine the ceiling of a report.

        Vertical visibility takes precedence; otherwise the ceiling is the
        lowest broken or overcast layer with a reported height.

        Args:
            report: Decoded report

        Returns:
            Ceiling in feet, or None if there is no ceiling
        """
        if report.vertical_visibility_ft is not None:
            return report.vertical_visibility_ft

        ceiling = None
        for layer in report.clouds:
            if layer.cover.is_ceiling and layer.height_reported:
                if ceiling is None or layer.altitude_feet < ceiling:
                    ceiling = layer.altitude_feet
        return ceiling

    @staticmethod
    def flight_category(visibility_meters: int, ceiling: Optional[int]) -> FlightCategory:
        """
        Classify visibility and ceiling into a flight category.

        Evaluated top-down, first match wins:
            LIFR:  visibility < 1600 m  or  ceiling < 500 ft
            IFR:   visibility < 5000 m  or  ceiling < 1000 ft
            MVFR:  visibility < 8000 m  or  ceiling < 3000 ft
            VFR:   otherwise

        Args:
            visibility_meters: Prevailing visibility in meters
            ceiling: Ceiling in feet, None for unlimited

        Returns:
            FlightCategory
        """
        if ceiling is None:
            ceiling = CEILING_UNLIMITED_FT

        if visibility_meters < 1600 or ceiling < 500:
            return FlightCategory.LIFR
        if visibility_meters < 5000 or ceiling < 1000:
            return FlightCategory.IFR
        if visibility_meters < 8000 or ceiling < 3000:
            return FlightCategory.MVFR
        return FlightCategory.VFR

    @staticmethod
    def wind_direction_name(degrees: Union[int, float, str]) -> str:
        """
        Name the 16-point compass direction for a wind heading.

        Args:
            degrees: Heading in degrees, or "VRB"

        Returns:
            Compass point such as "N" or "WSW", or "Variable" for VRB
        """
        if degrees == "VRB":
            return "Variable"
        return COMPASS_POINTS[round_half_up(degrees / 22.5) % 16]


def round_half_up(value: float) -> int:
    """Round to nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))

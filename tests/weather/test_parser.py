"""Tests for the METAR decoder."""

import pytest

from airfield_wx.weather.parser import MetarParser, decode, tokenize
from airfield_wx.weather.models import (
    CloudCover,
    CloudType,
    FlightCategory,
    PressureUnit,
    ReportType,
    RvrTrend,
)


class TestTokenize:
    """Test splitting raw text into groups."""

    def test_splits_on_whitespace_runs(self):
        assert tokenize("  ESMK   171350Z\t24012KT\n9999 ") == [
            "ESMK", "171350Z", "24012KT", "9999",
        ]

    def test_empty_input(self):
        assert tokenize("") == []
        assert tokenize("   ") == []

    def test_none_input(self):
        assert MetarParser.tokenize(None) == []


class TestDecodeScenarios:
    """Full reports decoded end to end."""

    def test_basic_metar(self):
        report = decode("ESMK 171350Z 24012G18KT 9999 FEW040 SCT080 12/05 Q1018")

        assert report.station == "ESMK"
        assert report.observation_time == "171350Z"
        assert report.wind.direction == 240
        assert report.wind.speed_knots == 12
        assert report.wind.gust_knots == 18
        assert report.visibility_meters == 9999
        assert [(c.cover, c.altitude_feet) for c in report.clouds] == [
            (CloudCover.FEW, 4000),
            (CloudCover.SCATTERED, 8000),
        ]
        assert report.temperature_celsius == 12
        assert report.dewpoint_celsius == 5
        assert report.pressure.value == 1018
        assert report.pressure.unit == PressureUnit.HECTOPASCAL
        assert report.flight_category == FlightCategory.VFR
        assert report.matched_groups == 8

    def test_raw_text_is_stripped(self):
        report = decode("  ESMK 171350Z 24012KT 9999  ")
        assert report.raw_text == "ESMK 171350Z 24012KT 9999"

    def test_broken_layer_at_500ft_is_not_lifr(self):
        report = decode("ESMK 181150Z 27012KT 9999 FEW040 SCT100 BKN005 18/08 Q1018")

        assert report.ceiling_ft == 500
        assert report.flight_category == FlightCategory.IFR

    def test_broken_layer_below_500ft_is_lifr(self):
        report = decode("ESMK 181150Z 27012KT 9999 FEW040 SCT100 BKN004 18/08 Q1018")

        assert report.ceiling_ft == 400
        assert report.flight_category == FlightCategory.LIFR

    def test_negative_temperatures(self):
        report = decode("ESMK 171350Z 36010KT 9999 OVC012 M05/M10 Q1030")

        assert report.temperature_celsius == -5
        assert report.dewpoint_celsius == -10

    def test_garbage_groups_are_skipped(self):
        report = decode("ESMK XYZZY 171350Z ??? 24012KT 12345 9999 FOO FEW040 #$% 12/05 Q1018")

        assert report.station == "ESMK"
        assert report.observation_time == "171350Z"
        assert report.wind.speed_knots == 12
        assert report.visibility_meters == 9999
        assert len(report.clouds) == 1
        assert report.temperature_celsius == 12
        assert report.pressure.value == 1018
        assert report.conditions == ()
        assert report.matched_groups == 7

    def test_fog_with_vertical_visibility(self):
        report = decode("ESMK 171350Z 00000KT 0100 FG VV001 M02/M02 Q1020")

        assert report.wind.is_calm
        assert report.visibility_meters == 100
        assert report.vertical_visibility_ft == 100
        assert report.ceiling_ft == 100
        assert report.conditions == ("Fog",)
        assert report.visibility_cause == "fog"
        assert report.flight_category == FlightCategory.LIFR

    def test_decoding_is_idempotent(self):
        raw = "ESMK 171350Z 24012G18KT 3000 -RA BR R24/1200U BKN008 OVC015 10/09 Q1008"
        assert decode(raw) == decode(raw)
        assert decode(raw).to_dict() == decode(raw).to_dict()

    def test_empty_report(self):
        report = decode("")

        assert report.station == ""
        assert report.observation_time == ""
        assert report.wind is None
        assert report.visibility_meters == 9999
        assert report.clouds == ()
        assert report.temperature_celsius is None
        assert report.pressure is None
        assert report.matched_groups == 0
        assert not report.has_data
        assert report.flight_category == FlightCategory.VFR

    def test_unrecognised_text_has_no_data(self):
        report = decode("HELLO WORLD 12345")
        assert not report.has_data


class TestStationAndTime:
    """Test report type, station and observation time groups."""

    def test_metar_prefix(self):
        report = decode("METAR ESMK 171350Z 24012KT 9999")
        assert report.report_type == ReportType.METAR
        assert report.station == "ESMK"

    def test_speci_prefix(self):
        report = decode("SPECI ESMK 171405Z 24012KT 4000")
        assert report.report_type == ReportType.SPECI
        assert report.station == "ESMK"

    def test_correction_after_report_type(self):
        report = decode("METAR COR ESMK 171350Z 24012KT 9999")
        assert report.report_type == ReportType.METAR
        assert report.station == "ESMK"
        assert report.observation_time == "171350Z"
        assert report.matched_groups == 5

    def test_leading_correction(self):
        assert decode("COR ESMK 171350Z").station == "ESMK"

    def test_correction_does_not_extend_window_further(self):
        report = decode("METAR COR 171350Z ESMK")
        assert report.station == ""

    def test_default_report_type(self):
        assert decode("ESMK 171350Z").report_type == ReportType.METAR

    def test_station_only_in_first_two_groups(self):
        report = decode("171350Z 24012KT ESMK 9999")
        assert report.station == ""

    def test_auto_is_not_a_station(self):
        report = decode("AUTO ESMK 171350Z")
        assert report.station == "ESMK"

    def test_first_time_wins(self):
        report = decode("ESMK 171350Z 171420Z")
        assert report.observation_time == "171350Z"
        assert report.matched_groups == 2


class TestWind:
    """Test wind groups."""

    def test_variable_direction(self):
        report = decode("ESMK 171350Z VRB03KT 9999")
        assert report.wind.direction == "VRB"
        assert report.wind.is_variable
        assert report.wind.direction_name == "Variable"

    def test_three_digit_speed(self):
        report = decode("ESMK 171350Z 270105G130KT")
        assert report.wind.speed_knots == 105
        assert report.wind.gust_knots == 130

    def test_mps_converted_to_knots(self):
        report = decode("UUEE 171350Z 05007G12MPS 9999")
        assert report.wind.speed_knots == 14
        assert report.wind.gust_knots == 23

    @pytest.mark.parametrize("mps", [1, 2, 5, 7, 10, 13, 25])
    def test_mps_speed_rounding(self, mps):
        report = decode(f"UUEE 171350Z 180{mps:02d}MPS")
        assert report.wind.speed_knots == int(mps * 1.944 + 0.5)

    def test_gust_not_above_speed_is_dropped(self):
        report = decode("ESMK 171350Z 24012G10KT")
        assert report.wind.speed_knots == 12
        assert report.wind.gust_knots is None

    def test_first_wind_wins(self):
        report = decode("ESMK 171350Z 24012KT 18005KT")
        assert report.wind.direction == 240
        assert report.wind.speed_knots == 12

    def test_variable_sector(self):
        report = decode("ESMK 171350Z 24008KT 200V280 9999")
        assert report.wind.variable_from == 200
        assert report.wind.variable_to == 280

    def test_variable_sector_without_wind_is_ignored(self):
        report = decode("ESMK 171350Z 200V280 9999")
        assert report.wind is None
        assert report.matched_groups == 3

    def test_invalid_direction_ignored(self):
        report = decode("ESMK 171350Z 99912KT")
        assert report.wind is None

    def test_calm_wind(self):
        report = decode("ESMK 171350Z 00000KT")
        assert report.wind is not None
        assert report.wind.is_calm
        assert report.wind.speed_knots == 0


class TestVisibility:
    """Test visibility and CAVOK groups."""

    @pytest.mark.parametrize("token", ["0000", "0050", "0800", "1599", "4500", "9000", "9999"])
    def test_visibility_value(self, token):
        report = decode(f"ESMK 171350Z 24012KT {token}")
        assert report.visibility_meters == int(token)
        assert (report.visibility_display == "10+ km") == (token == "9999")

    @pytest.mark.parametrize("token,display", [
        ("0800", "800 m"),
        ("1000", "1.0 km"),
        ("1500", "1.5 km"),
        ("3000", "3.0 km"),
        ("9999", "10+ km"),
    ])
    def test_visibility_display(self, token, display):
        assert decode(f"ESMK 171350Z {token}").visibility_display == display

    def test_cavok(self):
        report = decode("ESMK 171350Z 24005KT CAVOK 20/10 Q1015")

        assert report.cavok
        assert report.visibility_meters == 9999
        assert report.visibility_display == "CAVOK"
        assert report.clouds == ()
        assert report.flight_category == FlightCategory.VFR

    def test_visibility_after_cavok_replaces_it(self):
        report = decode("ESMK 171350Z 24005KT CAVOK 20/10 Q1015 TEMPO 3000 BR")

        assert not report.cavok
        assert report.visibility_meters == 3000
        assert report.visibility_display == "3.0 km"
        assert report.flight_category == FlightCategory.IFR

    def test_time_and_wind_not_read_as_visibility(self):
        report = decode("ESMK 171350Z 24012KT")
        assert report.visibility_meters == 9999


class TestRunwayVisualRange:
    """Test RVR groups."""

    def test_single_rvr_with_trend(self):
        report = decode("ESMK 171350Z 0600 R24/P1500U FG")
        rvr = report.runway_visual_range[0]

        assert rvr.runway == "24"
        assert rvr.visibility_meters == 1500
        assert rvr.variable_max is None
        assert rvr.trend == RvrTrend.IMPROVING

    def test_variable_rvr(self):
        report = decode("ESMK 171350Z 0600 R06L/0600V1000D")
        rvr = report.runway_visual_range[0]

        assert rvr.runway == "06L"
        assert rvr.visibility_meters == 600
        assert rvr.variable_max == 1000
        assert rvr.trend == RvrTrend.DETERIORATING

    def test_multiple_rvr_order_preserved(self):
        report = decode("ESMK 171350Z 0600 R24/1200N R06/0800 R33C/M0050/D")

        assert [r.runway for r in report.runway_visual_range] == ["24", "06", "33C"]
        assert report.runway_visual_range[0].trend == RvrTrend.NO_CHANGE
        assert report.runway_visual_range[1].trend is None
        assert report.runway_visual_range[2].visibility_meters == 50
        assert report.runway_visual_range[2].trend == RvrTrend.DETERIORATING


class TestWeatherPhenomena:
    """Test present weather groups and visibility cause."""

    @pytest.mark.parametrize("token,description", [
        ("RA", "Rain"),
        ("-RA", "Light rain"),
        ("+SN", "Heavy snow"),
        ("-SHRA", "Light rain showers"),
        ("SH", "Showers"),
        ("TS", "Thunderstorm"),
        ("TSRA", "Thunderstorm with rain"),
        ("+TSRASN", "Heavy thunderstorm with rain and snow"),
        ("FZFG", "Freezing fog"),
        ("BCFG", "Patches of fog"),
        ("BLSN", "Blowing snow"),
        ("VCSH", "Showers in the vicinity"),
        ("VCFG", "Fog in the vicinity"),
        ("RERA", "Recent rain"),
        ("HZ", "Haze"),
    ])
    def test_description(self, token, description):
        report = decode(f"ESMK 171350Z 3000 {token}")
        assert report.conditions == (description,)

    def test_conditions_deduplicated_except_intensity(self):
        report = decode("ESMK 171350Z 3000 -RA -RA +RA")
        assert report.conditions == ("Light rain", "Heavy rain")

    def test_precipitation_cause_overrides_obscuration(self):
        report = decode("ESMK 171350Z 3000 BR -RA OVC010 05/04 Q1000")

        assert report.conditions == ("Mist", "Light rain")
        assert report.visibility_cause == "light rain"

    def test_obscuration_does_not_replace_precipitation(self):
        report = decode("ESMK 171350Z 3000 -RA BR")
        assert report.visibility_cause == "light rain"

    def test_first_precipitation_wins(self):
        report = decode("ESMK 171350Z 3000 -RA SN")
        assert report.visibility_cause == "light rain"

    def test_first_obscuration_wins(self):
        report = decode("ESMK 171350Z 0800 FG BR")
        assert report.visibility_cause == "fog"

    def test_vicinity_and_recent_do_not_set_cause(self):
        report = decode("ESMK 171350Z 4000 VCSH RERA BR")

        assert report.conditions == ("Showers in the vicinity", "Recent rain", "Mist")
        assert report.visibility_cause == "mist"

    def test_descriptor_alone_is_not_weather(self):
        report = decode("ESMK 171350Z 9999 FZ")
        assert report.conditions == ()

    def test_other_phenomena_have_no_cause(self):
        report = decode("ESMK 171350Z 9999 SQ")
        assert report.conditions == ("Squalls",)
        assert report.visibility_cause is None


class TestClouds:
    """Test cloud groups."""

    @pytest.mark.parametrize("height", ["001", "005", "025", "100", "250"])
    def test_altitude_in_hundreds_of_feet(self, height):
        report = decode(f"ESMK 171350Z SCT{height}")
        assert report.clouds[0].altitude_feet == int(height) * 100

    def test_cloud_types(self):
        report = decode("ESMK 171350Z BKN020CB SCT030TCU OVC080///")

        assert report.clouds[0].type == CloudType.CUMULONIMBUS
        assert report.clouds[1].type == CloudType.TOWERING_CUMULUS
        assert report.clouds[2].type is None
        assert report.clouds[2].altitude_feet == 8000

    @pytest.mark.parametrize("token,cover", [
        ("SKC", CloudCover.CLEAR),
        ("CLR", CloudCover.CLEAR),
        ("NSC", CloudCover.INSIGNIFICANT),
        ("NCD", CloudCover.NONE),
    ])
    def test_no_layer_codes(self, token, cover):
        layer = decode(f"ESMK 171350Z 9999 {token}").clouds[0]

        assert layer.cover == cover
        assert layer.altitude_feet == 0
        assert not layer.height_reported
        assert layer.code == token

    def test_order_preserved(self):
        report = decode("ESMK 171350Z FEW005 OVC030 BKN015")
        assert [c.code for c in report.clouds] == ["FEW", "OVC", "BKN"]

    def test_ceiling_is_lowest_broken_or_overcast(self):
        report = decode("ESMK 171350Z 9999 FEW005 OVC030 BKN015")

        assert report.ceiling_ft == 1500
        assert report.flight_category == FlightCategory.MVFR

    def test_broken_without_height_is_not_a_ceiling(self):
        report = decode("ESMK 171350Z 9999 BKN///")

        assert report.clouds[0].cover == CloudCover.BROKEN
        assert report.ceiling_ft is None


class TestTemperatureAndPressure:
    """Test temperature/dewpoint and pressure groups."""

    def test_mixed_sign(self):
        report = decode("ESMK 171350Z 02/M01")
        assert report.temperature_celsius == 2
        assert report.dewpoint_celsius == -1

    def test_first_temperature_wins(self):
        report = decode("ESMK 171350Z 12/05 10/03")
        assert report.temperature_celsius == 12
        assert report.dewpoint_celsius == 5

    def test_inches_of_mercury(self):
        report = decode("KJFK 171351Z 18008KT 10SM FEW250 22/12 A2992")

        assert report.pressure.unit == PressureUnit.INCHES_HG
        assert report.pressure.value == pytest.approx(29.92)
        assert report.pressure.hectopascals == pytest.approx(1013.2)

    def test_first_pressure_wins(self):
        assert decode("ESMK 171350Z Q1018 A2992").pressure.value == 1018
        assert decode("ESMK 171350Z A2992 Q1013").pressure.unit == PressureUnit.INCHES_HG

"""Aviation Weather (aviationweather.gov) API source for raw METAR/TAF text."""

import logging
from typing import List, Optional

import requests

from airfield_wx import config
from airfield_wx.weather.models import WeatherSnapshot
from airfield_wx.weather.parser import decode

logger = logging.getLogger(__name__)


class AvWxSource:
    """
    Fetch the current raw METAR and TAF for a station from aviationweather.gov.

    Only the raw text endpoints are used. The METAR is decoded locally;
    the TAF is passed through untouched.

    Example:
        source = AvWxSource()
        snapshot = source.fetch_snapshot("ESMK")
        print(snapshot.metar.flight_category, snapshot.taf_raw)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = config.TIMEOUT,
        base_url: str = config.BASE_URL,
    ):
        """
        Args:
            session: Optional requests.Session for dependency injection (testing).
            timeout: HTTP request timeout in seconds.
            base_url: API base URL.
        """
        self._session = session or requests.Session()
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")
        self._session.headers.setdefault("User-Agent", config.USER_AGENT)

    def fetch_metar_raw(self, icao: str) -> Optional[str]:
        """
        Fetch the latest raw METAR for a station.

        Returns:
            METAR text, or None if unavailable
        """
        raw = self._fetch_raw("metar", {
            "ids": self._clean_icao(icao),
            "format": "raw",
        })
        for line in raw.splitlines():
            line = line.strip()
            if line:
                return line
        return None

    def fetch_taf_raw(self, icao: str) -> Optional[str]:
        """
        Fetch the current raw TAF for a station.

        Continuation lines are joined so the TAF comes back as one line.

        Returns:
            TAF text, or None if unavailable
        """
        raw = self._fetch_raw("taf", {
            "ids": self._clean_icao(icao),
            "format": "raw",
        })
        blocks = self._split_taf_blocks(raw)
        if not blocks:
            return None
        return " ".join(blocks[0].split())

    def fetch_snapshot(self, icao: str, demo_fallback: Optional[bool] = None) -> WeatherSnapshot:
        """
        Fetch and decode the current weather for a station.

        Args:
            icao: ICAO airport code.
            demo_fallback: Use demo data when neither METAR nor TAF could be
                fetched. Defaults to config.DEMO_FALLBACK.

        Returns:
            WeatherSnapshot (marked demo when demo data was substituted)
        """
        if demo_fallback is None:
            demo_fallback = config.DEMO_FALLBACK

        station = self._clean_icao(icao)
        metar_raw = self.fetch_metar_raw(station)
        taf_raw = self.fetch_taf_raw(station)

        if metar_raw is None and taf_raw is None and demo_fallback:
            logger.info("No weather available for %s, using demo data", station)
            return WeatherSnapshot(
                station=station,
                metar=decode(config.DEMO_METAR),
                metar_raw=config.DEMO_METAR,
                taf_raw=config.DEMO_TAF,
                demo=True,
            )

        return WeatherSnapshot(
            station=station,
            metar=decode(metar_raw) if metar_raw else None,
            metar_raw=metar_raw,
            taf_raw=taf_raw,
        )

    def _fetch_raw(self, endpoint: str, params: dict) -> str:
        """
        Make HTTP GET request and return raw text.

        Handles 204 (no data) and request failures by returning empty string.
        """
        url = f"{self._base_url}/{endpoint}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            if response.status_code == 204:
                return ""
            response.raise_for_status()
            return response.text
        except requests.RequestException as e:
            logger.warning("AvWx fetch failed for %s: %s", endpoint, e)
            return ""

    @staticmethod
    def _clean_icao(icao: str) -> str:
        return icao.strip().upper()

    @staticmethod
    def _split_taf_blocks(raw_text: str) -> List[str]:
        """
        Split raw TAF text into individual TAF blocks.

        The API separates TAFs by blank lines or TAF headers; a single TAF
        may span several continuation lines.
        """
        if not raw_text or not raw_text.strip():
            return []

        blocks = []
        current = []

        for line in raw_text.splitlines():
            stripped = line.strip()
            if not stripped:
                if current:
                    blocks.append("\n".join(current))
                    current = []
                continue

            if stripped.startswith("TAF") and current:
                blocks.append("\n".join(current))
                current = [stripped]
            else:
                current.append(stripped)

        if current:
            blocks.append("\n".join(current))

        return blocks

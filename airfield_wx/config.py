"""
Runtime configuration for the airfield weather kiosk.

Values are read from the environment once, at import time.
"""

import os

# Station shown on the kiosk
STATION = os.getenv("AIRFIELD_WX_STATION", "ESMK").strip().upper()

# aviationweather.gov data API
BASE_URL = os.getenv("AIRFIELD_WX_BASE_URL", "https://aviationweather.gov/api/data").rstrip("/")
TIMEOUT = int(os.getenv("AIRFIELD_WX_TIMEOUT", "15"))  # seconds
USER_AGENT = "airfield-wx/0.1 (airfield weather kiosk)"

# Substitute demo data when the provider cannot be reached
DEMO_FALLBACK = os.getenv("AIRFIELD_WX_DEMO_FALLBACK", "true").lower() in ("1", "true", "yes")

DEMO_METAR = "ESMK 181150Z 27012KT 9999 FEW040 SCT100 18/08 Q1018"
DEMO_TAF = "TAF ESMK 181100Z 1812/1912 28010KT 9999 FEW040 SCT100 TEMPO 1815/1820 SHRA BKN030"

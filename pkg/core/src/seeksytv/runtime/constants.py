"""
Runtime constants for ad resolution and telemetry.

Edge-function names are fixed by the hosted backend; the timing defaults are
overridable through settings (AD_SKIP_DELAY_SECONDS).
"""

from __future__ import annotations

# Edge functions
GET_ADS_FUNCTION = "seeksy-tv-get-ads"
LOG_IMPRESSION_FUNCTION = "seeksy-tv-log-impression"
LOG_AD_EVENT_FUNCTION = "seeksy-tv-log-ad-event"
CLICK_REDIRECT_FUNCTION = "seeksy-tv-ad-click-redirect"

# Catalog tables
CONTENT_TABLE = "tv_content"
CONTENT_SELECT = "*,channel:tv_channels(id,name,slug)"
RELATED_LIMIT = 8

# Skip gate: locked for DEFAULT_SKIP_DELAY_SECONDS, counted down in whole seconds
DEFAULT_SKIP_DELAY_SECONDS = 5
SKIP_TICK_SECONDS = 1.0

# Fraction of ad duration at which each quartile marker fires
QUARTILE_THRESHOLDS = (0.25, 0.5, 0.75)

# Media elements report progress roughly four times a second
TIME_UPDATE_INTERVAL_SECONDS = 0.25

DEFAULT_CHANNEL_NAME = "Seeksy TV"

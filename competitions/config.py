"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

import os


def _get_int(key: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(key: str, default: bool) -> bool:
    """Get boolean from environment variable."""
    value = os.environ.get(key)
    if value is None:
        return default
    return value.lower() in ('true', '1', 'yes')


def _get_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


# =============================================================================
# SERVER SETTINGS
# =============================================================================
PORT = _get_int('PORT', 8000)
HOST = _get_str('HOST', '0.0.0.0')

# =============================================================================
# STORAGE SETTINGS
# =============================================================================
# "sqlite" (default) or "memory"
DB_TYPE = _get_str('DB_TYPE', 'sqlite')

# Directory holding the SQLite file
DATA_DIR = os.environ.get('DATA_DIR') or 'data'

# =============================================================================
# EXTERNAL RATINGS
# =============================================================================
# JSON endpoint returning [{"team": ..., "rating": ..., "rank": ...}, ...]
# Empty disables fetching; every rating is then unknown.
RATINGS_URL = _get_str('RATINGS_URL', '')

# A rating snapshot older than this is stale and re-fetched
# Default: 1 hour
RATINGS_CACHE_TTL_SECONDS = _get_int('RATINGS_CACHE_TTL_SECONDS', 3600)

RATINGS_TIMEOUT_SECONDS = _get_float('RATINGS_TIMEOUT_SECONDS', 30.0)

# Background pre-warm of the rating cache inside the web app
RATINGS_BACKGROUND_REFRESH = _get_bool('RATINGS_BACKGROUND_REFRESH', True)

# Interval between background refreshes
RATINGS_REFRESH_MINUTES = _get_int('RATINGS_REFRESH_MINUTES', 60)

# =============================================================================
# RATE LIMITING
# =============================================================================
# Cooldown between forced rating refresh requests (in seconds)
# Default: 5 minutes (300 seconds)
REFRESH_COOLDOWN_SECONDS = _get_int('REFRESH_COOLDOWN_SECONDS', 300)

# =============================================================================
# RATING MODEL
# =============================================================================
# Empirical constants of the margin curve. These are heuristics, not values
# validated against real competitive outcomes.
RATING_MIN_SWING = _get_int('RATING_MIN_SWING', 125)
RATING_MAX_SWING = _get_int('RATING_MAX_SWING', 600)
RATING_CURVE_SPAN = _get_float('RATING_CURVE_SPAN', 0.5)
RATING_CURVE_ANGLE = _get_float('RATING_CURVE_ANGLE', 0.4)  # multiple of pi

# Blowout classifier
BLOWOUT_RATING_GAP = _get_int('BLOWOUT_RATING_GAP', 600)
BLOWOUT_MIN_OTHER_RESULTS = _get_int('BLOWOUT_MIN_OTHER_RESULTS', 5)

# =============================================================================
# STORYLINES
# =============================================================================
# Closest game only makes the narrative when decided by this margin or less
CLOSE_GAME_MARGIN = _get_int('CLOSE_GAME_MARGIN', 2)

# =============================================================================
# LOGGING
# =============================================================================
LOG_LEVEL = _get_str('LOG_LEVEL', 'INFO')

"""
Configuration constants for the cinebase backend.

Every value can be overridden through an environment variable; invalid numeric
values fall back to their defaults with a warning.
"""

import os  # environment lookups
from pathlib import Path  # seed data location

from loguru import logger  # console logger


def _get_float_env(key: str, default: float, min_val: float = 0) -> float:
	"""Parse a float from the environment, clamping to min_val."""
	try:
		val = float(os.environ.get(key, default))
		if val < min_val:
			logger.warning(f"[Config] {key}={val} is below minimum {min_val}, using {min_val}")
			return min_val
		return val
	except ValueError:
		logger.warning(f"[Config] Invalid {key}='{os.environ.get(key)}', using default {default}")
		return default


def _get_int_env(key: str, default: int, min_val: int = 0, max_val: int = None) -> int:
	"""Parse an integer from the environment, keeping it inside [min_val, max_val]."""
	try:
		val = int(os.environ.get(key, default))
	except ValueError:
		logger.warning(f"[Config] Invalid {key}='{os.environ.get(key)}', using default {default}")
		return default
	if val < min_val:
		logger.warning(f"[Config] {key}={val} is below minimum {min_val}, using {min_val}")
		return min_val
	if max_val is not None and val > max_val:
		logger.warning(f"[Config] {key}={val} is above maximum {max_val}, using {max_val}")
		return max_val
	return val


def _get_bool_env(key: str, default: bool) -> bool:
	raw = os.environ.get(key)
	if raw is None:
		return default
	return raw.strip().lower() in ('1', 'true', 'yes', 'on')


# Storage backend: 'memory' keeps everything in-process, 'mongo' uses MONGO_URI
STORE_BACKEND = os.environ.get("CINEBASE_STORE", "mongo").strip().lower()
MONGO_URI = os.environ.get("MONGO_URI", "mongodb://localhost:27017/")
MONGO_DATABASE = os.environ.get("MONGO_DATABASE", "cinebase")

# Auth
JWT_SECRET = os.environ.get("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = _get_int_env("JWT_EXPIRES_MINUTES", 60 * 24, min_val=1)
BCRYPT_ROUNDS = _get_int_env("BCRYPT_ROUNDS", 12, min_val=4, max_val=31)

# Email transport for reminder notifications
SMTP_HOST = os.environ.get("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = _get_int_env("SMTP_PORT", 587, min_val=1, max_val=65535)
SMTP_USER = os.environ.get("EMAIL_USER", "")
SMTP_PASSWORD = os.environ.get("EMAIL_PASS", "")
EMAIL_FROM = os.environ.get("EMAIL_FROM", SMTP_USER or "noreply@cinebase.local")
SMTP_TIMEOUT = _get_float_env("SMTP_TIMEOUT", 30.0, min_val=1.0)

# Reminder scheduler: one run per day at REMINDER_RUN_HOUR:REMINDER_RUN_MINUTE local time
REMINDER_SCHEDULER_ENABLED = _get_bool_env("REMINDER_SCHEDULER_ENABLED", True)
REMINDER_RUN_HOUR = _get_int_env("REMINDER_RUN_HOUR", 0, min_val=0, max_val=23)
REMINDER_RUN_MINUTE = _get_int_env("REMINDER_RUN_MINUTE", 0, min_val=0, max_val=59)

# Recommendation / similarity tuning
RECOMMENDATION_LIMIT = 10  # max items returned by personalized recommendations
SIMILAR_RATING_TOLERANCE = _get_float_env("SIMILAR_RATING_TOLERANCE", 0.4, min_val=0.0)
ANALYTICS_TOP_N = 10  # admin leaderboards
SEARCH_SCORE_CUTOFF = _get_float_env("SEARCH_SCORE_CUTOFF", 60.0, min_val=0.0)

# Seed data consumed by scripts/seed_catalog.py
SEED_DIR = Path(os.environ.get("CINEBASE_SEED_DIR", "data"))

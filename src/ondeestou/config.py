"""Configuration management."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
# Try to load from standard locations
env_paths = [
    Path.home() / ".config" / "ondeestou" / ".env",  # Per-user location
    Path(".env"),  # Current directory
    Path(__file__).parent.parent.parent / ".env",  # Project root
]
for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break
else:
    # Fallback: try default load_dotenv() behavior
    load_dotenv()


def _get_list(name: str, default: str) -> list:
    """Read a comma separated list from the environment."""
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Device context: "mobile" (GPS, strict accuracy) or "desktop" (WiFi/IP, lenient)
DEVICE_TYPE = os.getenv("DEVICE_TYPE", "mobile").lower()

# Accuracy quality buckets rejected by PositionManager, per device context
MOBILE_NOT_ACCEPTED_ACCURACY = _get_list("MOBILE_NOT_ACCEPTED_ACCURACY", "medium,bad,very_bad")
DESKTOP_NOT_ACCEPTED_ACCURACY = _get_list("DESKTOP_NOT_ACCEPTED_ACCURACY", "bad,very_bad")

# Position tracking thresholds
# TRACKING_INTERVAL_MS: updates closer than this are flagged "immediate"
# MINIMUM_DISTANCE_CHANGE_M: movement below this is rejected as noise
TRACKING_INTERVAL_MS = int(os.getenv("TRACKING_INTERVAL_MS", "50000"))
MINIMUM_DISTANCE_CHANGE_M = float(os.getenv("MINIMUM_DISTANCE_CHANGE_M", "20"))

# Address cache
ADDRESS_CACHE_MAX_SIZE = int(os.getenv("ADDRESS_CACHE_MAX_SIZE", "50"))
ADDRESS_CACHE_EXPIRATION_MS = int(os.getenv("ADDRESS_CACHE_EXPIRATION_MS", "300000"))  # 5 minutes
ADDRESS_CACHE_CLEANUP_INTERVAL_S = float(os.getenv("ADDRESS_CACHE_CLEANUP_INTERVAL_S", "60"))

# Address fields watched for change announcements
TRACKED_ADDRESS_FIELDS = _get_list("TRACKED_ADDRESS_FIELDS", "logradouro,bairro,municipio")

# Speech queue
SPEECH_QUEUE_MAX_SIZE = int(os.getenv("SPEECH_QUEUE_MAX_SIZE", "100"))
SPEECH_QUEUE_EXPIRATION_MS = int(os.getenv("SPEECH_QUEUE_EXPIRATION_MS", "30000"))
# Backup drain trigger, in case the speaker never reports completion
QUEUE_TIMER_INTERVAL_S = float(os.getenv("QUEUE_TIMER_INTERVAL_S", "5"))

# Speech output command (text is appended as last argument), e.g. "espeak -v pt-br".
# Empty: announcements are only written to the log.
TTS_COMMAND = os.getenv("TTS_COMMAND", "")

# Nominatim reverse geocoding API
NOMINATIM_API_URL = os.getenv("NOMINATIM_API_URL", "https://nominatim.openstreetmap.org/reverse")
NOMINATIM_RATE_LIMIT_SECONDS = 1  # Nominatim requires max 1 request per second
NOMINATIM_TIMEOUT = 5  # seconds
NOMINATIM_LANGUAGE = os.getenv("NOMINATIM_LANGUAGE", "pt-BR")

# Project information
PROJECT_NAME = "Ondeestou"
USER_AGENT = f"{PROJECT_NAME}/0.7.0"


def not_accepted_accuracy(device_type: str = None) -> list:
    """Return the accuracy reject-list for a device context."""
    device_type = (device_type or DEVICE_TYPE).lower()
    if device_type == "desktop":
        return list(DESKTOP_NOT_ACCEPTED_ACCURACY)
    return list(MOBILE_NOT_ACCEPTED_ACCURACY)

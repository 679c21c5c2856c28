"""
Central configuration — reads from .env file.

Every setting is a module attribute read once at import. API keys are
optional here: a missing key only becomes an error (ConfigurationError) when
the call that needs it is made, so the web surface can still start and tell
the user what is missing.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Google Cloud Vision ───────────────────────────────────────────────────────
# Create a key at https://console.cloud.google.com → APIs & Services → Credentials
# and enable "Cloud Vision API" for the project.
GOOGLE_VISION_API_KEY: str | None = os.getenv("GOOGLE_VISION_API_KEY") or None

VISION_API_URL: str = os.getenv(
    "VISION_API_URL", "https://vision.googleapis.com/v1/images:annotate"
)
VISION_TIMEOUT_SECONDS: float = float(os.getenv("VISION_TIMEOUT_SECONDS", "30"))

# ── Google Gemini ─────────────────────────────────────────────────────────────
# Get a key at https://aistudio.google.com/apikey
GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY") or None
GEMINI_MODEL: str          = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# ── Web surface ───────────────────────────────────────────────────────────────
WEB_HOST: str         = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT: int         = int(os.getenv("WEB_PORT", "8080"))
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
# Upload sessions kept in memory; the least recently used one is dropped first
MAX_SESSIONS: int     = int(os.getenv("MAX_SESSIONS", "500"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

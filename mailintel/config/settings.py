"""
Environment settings loaded from .env file.

The library never configures logging itself. LOG_LEVEL is read for the
embedding application, e.g. logging.basicConfig(level=settings.LOG_LEVEL).
"""
import os
from dotenv import load_dotenv

load_dotenv()


# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
MAX_BODY_LOG_CHARS: int = int(os.getenv("MAX_BODY_LOG_CHARS", "200"))

# --- Body / Signature ---
HTML_INCLUDE_LINK_TARGETS: bool = os.getenv("HTML_INCLUDE_LINK_TARGETS", "true").lower() == "true"
SIGNATURE_MAX_LINES: int = int(os.getenv("SIGNATURE_MAX_LINES", "8"))

# --- Spam heuristics ---
SPAM_UPPERCASE_RATIO: float = float(os.getenv("SPAM_UPPERCASE_RATIO", "0.7"))
SPAM_MIN_URLS: int = int(os.getenv("SPAM_MIN_URLS", "3"))
SPAM_URL_DENSITY: float = float(os.getenv("SPAM_URL_DENSITY", "0.1"))
SPAM_TRACKING_URLS: int = int(os.getenv("SPAM_TRACKING_URLS", "3"))

# --- Output ---
VALIDATE_OUTPUT: bool = os.getenv("VALIDATE_OUTPUT", "false").lower() == "true"

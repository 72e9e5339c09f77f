import os
from pathlib import Path
from dotenv import load_dotenv

# Always load the .env that sits next to this file (makazi/.env)
ENV_PATH = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True) # override=True (If a variable already exists, replace it

ENV = os.getenv("ENV", "development") # what environment we're running in (development, production, etc.)
LOG_LEVEL = os.getenv("LOG_LEVEL", "info") # how noisy the logs should be (debug, info, warning, error, critical)

_DEV_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# production log shipper stamps its own time
_PROD_LOG_FORMAT = "%(levelname)s %(name)s %(message)s"


def log_format(env: str) -> str:
    return _PROD_LOG_FORMAT if env.strip().lower() == "production" else _DEV_LOG_FORMAT


LOG_FORMAT = log_format(ENV)

# OpenStreetMap Nominatim (geocoding fallback for place names)
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org").rstrip("/")
# Nominatim usage policy requires a User-Agent with contact info
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "Makazi/1.0 (support@makazi.app)")
GEOCODE_TIMEOUT_SECONDS = float(os.getenv("GEOCODE_TIMEOUT_SECONDS", "5.0"))

# Short map links (maps.app.goo.gl/...) are expanded by following redirects
EXPAND_TIMEOUT_SECONDS = float(os.getenv("EXPAND_TIMEOUT_SECONDS", "8.0"))

# Listings within this many km of the resolved point count as "nearby"
NEARBY_RADIUS_KM = float(os.getenv("NEARBY_RADIUS_KM", "5.0"))

# SQLite catalog of known locations. Falls back to the built-in catalog when the file is missing.
CATALOG_DB_PATH = Path(os.getenv("CATALOG_DB_PATH", str(Path(__file__).resolve().parent / "data" / "catalog.db")))

CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

if NEARBY_RADIUS_KM <= 0:
    raise RuntimeError(f"NEARBY_RADIUS_KM must be positive (loaded from: {ENV_PATH})")

if GEOCODE_TIMEOUT_SECONDS <= 0 or EXPAND_TIMEOUT_SECONDS <= 0:
    raise RuntimeError(f"HTTP timeouts must be positive (loaded from: {ENV_PATH})")

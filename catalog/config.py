import os

from dotenv import load_dotenv

# Settings come from the environment, optionally through a .env file in the
# working directory.
load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


API_PREFIX = "/api/v1"

HOST = os.getenv("CATALOG_HOST", "0.0.0.0")
PORT = int(os.getenv("CATALOG_PORT", "8085"))
LOG_LEVEL = os.getenv("CATALOG_LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [o.strip() for o in os.getenv("CATALOG_CORS_ORIGINS", "*").split(",") if o.strip()]

SEED_DEMO_DATA = _flag("CATALOG_SEED_DEMO_DATA", "false")
ENABLE_RESET = _flag("CATALOG_ENABLE_RESET", "true")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 2000
DEFAULT_LOW_STOCK_THRESHOLD = 10

import logging
import os
from dataclasses import dataclass
from dotenv import load_dotenv


DEFAULT_CATALOG_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), '..', 'data', 'catalog.json')


@dataclass(frozen=True)
class Settings:
    catalog_path: str
    geocoder_url: str
    geocoder_user_agent: str
    geocoder_timeout: float
    position_url: str
    permission_file: str
    host: str
    port: int
    debug: bool
    log_level: str


def get_settings() -> Settings:
    # Load once per process; re-calling is cheap and idempotent
    load_dotenv(override=False)
    return Settings(
        catalog_path=os.path.normpath(os.getenv("MEDFINDER_CATALOG", DEFAULT_CATALOG_PATH)),
        geocoder_url=os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/reverse"),
        geocoder_user_agent=os.getenv("GEOCODER_USER_AGENT", "Disease Information System"),
        geocoder_timeout=float(os.getenv("GEOCODER_TIMEOUT", "10")),
        position_url=os.getenv("POSITION_URL", "https://ipapi.co/json/"),
        permission_file=os.path.expanduser(os.getenv("PERMISSION_FILE", "~/.medfinder/permission.json")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        debug=os.getenv("DEBUG", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

"""Configuration utilities.

Central place for the environment driven settings of a search run (site URLs,
passenger type, timeouts). A `.env` file is optional and only overrides defaults.
The fetch engine receives a Settings instance explicitly, so tests can build
their own with short timeouts and fake endpoints.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env once on module import
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class Settings:
    passenger_type_code: str = os.getenv("NORTEBUS_PASSENGER_TYPE", "A1")
    language: str = os.getenv("NORTEBUS_LANGUAGE", "pt-BR")
    search_url_template: str = os.getenv(
        "NORTEBUS_SEARCH_URL",
        "https://viagem.satelitenorte.com.br/search/{origin}/{destination}/{date}"
        "/p/{passenger_type}/departures?lang={language}",
    )
    target_api_base_url: str = os.getenv(
        "NORTEBUS_API_URL", "https://one-api.satelitenorte.com.br/api/v2/search"
    )
    target_api_type_marker: str = os.getenv("NORTEBUS_API_TYPE_MARKER", "?type=bus")
    navigation_timeout_ms: int = int(os.getenv("NORTEBUS_NAVIGATION_TIMEOUT_MS", "40000"))
    capture_timeout_ms: int = int(os.getenv("NORTEBUS_CAPTURE_TIMEOUT_MS", "45000"))
    poll_interval_ms: int = int(os.getenv("NORTEBUS_POLL_INTERVAL_MS", "250"))
    dates_per_route: int = int(os.getenv("NORTEBUS_DATES_PER_ROUTE", "4"))
    headless: bool = _env_flag("NORTEBUS_HEADLESS", "true")
    log_level: str = os.getenv("NORTEBUS_LOG_LEVEL", "INFO")

    def search_url(self, date_str: str, origin: str, destination: str) -> str:
        return self.search_url_template.format(
            origin=origin,
            destination=destination,
            date=date_str,
            passenger_type=self.passenger_type_code,
            language=self.language,
        )


settings = Settings()

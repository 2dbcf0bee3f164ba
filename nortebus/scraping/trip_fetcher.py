"""Playwright based fetcher for the bus search API payload.

The search page renders its departures from an asynchronous call to the booking API
made after the document has loaded, so the data is not in the HTML. Instead of scraping
the rendered widgets we listen to the page's network responses and keep the first one
that comes from the search API and carries a `trips` array.
"""
import logging
import time
from collections import deque
from collections.abc import Callable
from datetime import date
from typing import Any

from playwright.sync_api import Error as PlaywrightError, Page, Response, sync_playwright

from ..config import Settings, settings as default_settings
from .base_driver import BasePlaywrightDriver


class CaptureTimeoutError(Exception):
    """The search API response was not observed before the capture deadline."""


class _ResponseCapture:
    """Queues candidate API responses seen by the page.

    Bodies are decoded later, from the waiting loop, not inside the event handler.
    """

    def __init__(self, api_base_url: str, type_marker: str):
        self.api_base_url = api_base_url
        self.type_marker = type_marker
        self._pending: deque[Response] = deque()

    def is_candidate(self, url: str) -> bool:
        return url.startswith(self.api_base_url) and self.type_marker in url

    def on_response(self, response: Response) -> None:
        if self.is_candidate(response.url):
            self._pending.append(response)

    def take_match(self) -> dict | None:
        while self._pending:
            payload = self._decode(self._pending.popleft())
            if payload is not None:
                return payload
        return None

    @staticmethod
    def _decode(response: Response) -> dict | None:
        try:
            data = response.json()
        except (PlaywrightError, ValueError) as e:
            logging.debug("Ignoring undecodable response from %s: %s", response.url, e)
            return None
        if isinstance(data, dict) and isinstance(data.get("trips"), list):
            return data
        return None


class TripFetcher(BasePlaywrightDriver):
    def __init__(
            self,
            config: Settings = default_settings,
            playwright_factory: Callable[[], Any] = sync_playwright,
            clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(headless=config.headless, playwright_factory=playwright_factory)
        self.config = config
        self._clock = clock

    def fetch_trips(self, trip_date: date | str, origin: str, destination: str) -> dict | None:
        """Return the raw search payload for one date, or None when it could not be captured."""
        date_str = trip_date.isoformat() if isinstance(trip_date, date) else trip_date
        try:
            payload = self.execute(date_str, origin, destination)
        except CaptureTimeoutError as e:
            logging.error("%s", e)
            return None
        except PlaywrightError as e:
            logging.error("Could not search buses on %s (%s -> %s): %s", date_str, origin, destination, e)
            return None
        except Exception:  # noqa: BLE001
            logging.exception("Unexpected failure searching buses on %s (%s -> %s)", date_str, origin, destination)
            return None
        logging.info("Captured %d trips for %s (%s -> %s)", len(payload["trips"]), date_str, origin, destination)
        return payload

    def run(self, page: Page, date_str: str, origin: str, destination: str) -> dict:
        url = self.config.search_url(date_str, origin, destination)
        capture = _ResponseCapture(self.config.target_api_base_url, self.config.target_api_type_marker)
        deadline = self._clock() + self.config.capture_timeout_ms / 1000

        page.on("response", capture.on_response)
        try:
            logging.debug("Opening %s", url)
            page.goto(url, wait_until="domcontentloaded", timeout=self.config.navigation_timeout_ms)
            return self._wait_for_payload(page, capture, deadline, date_str, origin, destination)
        finally:
            page.remove_listener("response", capture.on_response)

    def _wait_for_payload(self, page: Page, capture: _ResponseCapture, deadline: float,
                          date_str: str, origin: str, destination: str) -> dict:
        while (payload := capture.take_match()) is None:
            remaining_ms = (deadline - self._clock()) * 1000
            if remaining_ms <= 0:
                raise CaptureTimeoutError(
                    f"Timeout: did not capture the target JSON response from {self.config.target_api_base_url} "
                    f"within {self.config.capture_timeout_ms / 1000:g} seconds for {date_str} "
                    f"({origin} -> {destination})."
                )
            # wait_for_timeout keeps dispatching page events, so on_response still fires meanwhile
            page.wait_for_timeout(min(self.config.poll_interval_ms, remaining_ms))
        return payload

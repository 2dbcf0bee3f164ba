import logging
from collections.abc import Callable
from typing import Any

from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from playwright_stealth import Stealth


class BasePlaywrightDriver:
    """Headless Chromium driver with anti-bot stealth applied.

    Every execute() call launches its own browser, so cookies and storage never carry
    over from one run to the next. The browser is closed on every exit path.
    """

    timeout: int = 30 * 1000
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/131.0.0.0 Safari/537.36"
    )
    viewport: dict[str, int] = {"width": 1366, "height": 768}
    locale: str = "pt-BR"
    timezone_id: str = "America/Sao_Paulo"

    def __init__(self, headless: bool = True, playwright_factory: Callable[[], Any] = sync_playwright):
        self.headless = headless
        self._playwright_factory = playwright_factory

    def _get_browser_args(self) -> list[str]:
        return [
            "--disable-blink-features=AutomationControlled",
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-first-run",
            "--no-zygote",
            "--disable-gpu",
        ]

    def launch_browser(self, playwright: Playwright) -> Browser:
        return playwright.chromium.launch(headless=self.headless, args=self._get_browser_args())

    def new_page(self, browser: Browser) -> Page:
        """Create a fresh context and page with stealth applied."""
        context = browser.new_context(
            user_agent=self.user_agent,
            locale=self.locale,
            timezone_id=self.timezone_id,
            viewport=self.viewport,
            screen=self.viewport,
            color_scheme="light",
            has_touch=False,
            java_script_enabled=True,
            extra_http_headers={
                "Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
                "sec-ch-ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
                "sec-ch-ua-mobile": "?0",
                "sec-ch-ua-platform": '"Windows"',
            },
        )

        # Images and fonts are not needed, the data arrives through an XHR
        context.route(
            "**/*.{png,jpg,jpeg,webp,svg,gif,woff,woff2}",
            lambda route: route.abort(),
        )

        # Mask headless-mode fingerprints via JS overrides
        context.add_init_script("""
            Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
            Object.defineProperty(navigator, 'languages', { get: () => ['pt-BR', 'pt', 'en-US', 'en'] });
            window.chrome = { runtime: {} };
        """)

        page = context.new_page()
        Stealth().apply_stealth_sync(page)
        page.set_default_timeout(self.timeout)
        logging.debug("Browser page created with stealth applied.")
        return page

    @staticmethod
    def close_browser(browser: Browser) -> None:
        try:
            browser.close()
        except Exception:  # noqa: BLE001
            logging.exception("Could not close the browser")

    def run(self, page: Page, *args, **kwargs):
        """Override in subclasses. Called with a fresh page inside a playwright context."""
        raise NotImplementedError

    def execute(self, *args, **kwargs):
        """Entry point: starts playwright and a browser, calls run(), closes the browser."""
        with self._playwright_factory() as p:
            browser = self.launch_browser(p)
            try:
                page = self.new_page(browser)
                return self.run(page, *args, **kwargs)
            finally:
                self.close_browser(browser)

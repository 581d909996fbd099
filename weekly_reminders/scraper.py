"""
Browser session that logs into the school site and harvests weekly mailings.

The target page is unpredictable: a cookie banner may or may not appear, the
password box is sometimes hidden behind a modal, and document links render
asynchronously after login. The session therefore walks a fixed sequence of
states where every step before link harvesting except navigation is
best-effort:

    IDLE -> NAVIGATED -> CONSENT_HANDLED -> AUTHENTICATED -> LINKS_HARVESTED
         -> DOWNLOADING -> DONE            (any fatal error -> FAILED)

Downloads go through the authenticated browser context so they carry the
session cookies; a plain HTTP client would be redirected to the login page.
"""

import base64
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo

from playwright.sync_api import sync_playwright, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from weekly_reminders.config import Settings, settings as default_settings
from weekly_reminders.dates import ScheduleCalculator
from weekly_reminders.exceptions import AcquisitionError, ScrapeCancelled
from weekly_reminders.schemas import DocumentCreate, DocumentRef, LogStep, ScrapeResult, WEEKLY_MAILING

logger = logging.getLogger(__name__)

CONSENT_SELECTORS = [
    'button:has-text("Accept All")',
    'button:has-text("Accept")',
    '[data-testid="cookie-accept"]',
    '#accept-cookies',
    '.cookie-accept',
    'button.accept',
]

DOCUMENT_SUFFIXES = (".pdf",)

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox", "--disable-dev-shm-usage"]

LINKS_SCRIPT = """els => els.map(a => ({href: a.href, text: (a.textContent || '').trim()}))"""
FOCUSED_TYPE_SCRIPT = """() => {
    const el = document.activeElement;
    return el ? (el.type || '') : '';
}"""


class SessionState(str, Enum):
    IDLE = "idle"
    NAVIGATED = "navigated"
    CONSENT_HANDLED = "consent_handled"
    AUTHENTICATED = "authenticated"
    LINKS_HARVESTED = "links_harvested"
    DOWNLOADING = "downloading"
    DONE = "done"
    FAILED = "failed"


@contextmanager
def launch_browser(config: Settings):
    """Headless Chromium with one context and one page; always torn down"""
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True, args=BROWSER_ARGS)
        try:
            context = browser.new_context(viewport={"width": 1920, "height": 1080})
            page = context.new_page()
            yield context, page
        finally:
            browser.close()


def is_document_link(href: str) -> bool:
    return urlparse(href).path.lower().endswith(DOCUMENT_SUFFIXES)


class AcquisitionSession:
    """
    One scrape of the mailing page.

    `persist` is called once per downloaded document (normally
    IngestionRecorder.persist_document). The browser process is closed on
    every exit path, including cancellation.
    """

    def __init__(
        self,
        persist: Callable[[DocumentCreate], object],
        config: Settings = None,
        browser_launcher=launch_browser
    ):
        self.persist = persist
        self.config = config or default_settings
        self.browser_launcher = browser_launcher
        self.state = SessionState.IDLE
        self.log: List[LogStep] = []
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Ask the session to stop at the next step boundary"""
        self._cancelled.set()

    def run(self, url: str, password: Optional[str] = None, now: Optional[datetime] = None) -> ScrapeResult:
        result = ScrapeResult()
        now = now or datetime.now(ZoneInfo(self.config.timezone))

        try:
            if not url:
                raise AcquisitionError("Scraping URL not configured in settings")

            self._log(1, "Launching browser in headless mode")
            with self.browser_launcher(self.config) as (context, page):
                self._navigate(page, url)
                self._dismiss_consent(page)
                self._dismiss_overlays(page)
                self._authenticate(page, password)
                self._settle(page)
                result.document_refs = self._harvest_links(page)
                result.found = len(result.document_refs)
                self._download_all(context, result, now)
            self._advance(SessionState.DONE)
            self._log(8, f"Browser closed: {result.processed}/{result.found} documents processed")
        except Exception as e:
            message = str(e) or type(e).__name__
            self._advance(SessionState.FAILED)
            self._log(0, f"Scraping failed: {message}")
            result.status = "failed"
            result.error = message

        result.log = list(self.log)
        return result

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------

    def _navigate(self, page, url: str) -> None:
        self._checkpoint()
        self._log(1, f"Navigating to {url}")
        try:
            page.goto(url, wait_until="networkidle", timeout=self.config.navigation_timeout_ms)
        except PlaywrightError as e:
            raise AcquisitionError(f"Navigation to {url} failed: {e}") from e
        self._advance(SessionState.NAVIGATED)

    def _dismiss_consent(self, page) -> None:
        self._checkpoint()
        self._log(2, "Handling cookie consent")
        for selector in CONSENT_SELECTORS:
            try:
                page.wait_for_selector(selector, timeout=self.config.consent_wait_timeout_ms, state="visible")
                page.click(selector)
                page.wait_for_timeout(1000)
            except PlaywrightError:
                continue
            self._log(2, f"Accepted cookie consent via {selector}")
            break
        else:
            self._log(2, "No cookie consent banner found or already accepted")
        self._advance(SessionState.CONSENT_HANDLED)

    def _dismiss_overlays(self, page) -> None:
        self._checkpoint()
        self._log(3, "Pressing ESC key to dismiss popups")
        try:
            page.keyboard.press("Escape")
            page.wait_for_timeout(1000)
        except PlaywrightError as e:
            self._log(3, f"ESC key press failed: {e}")

    def _authenticate(self, page, password: Optional[str]) -> None:
        self._checkpoint()
        if not password:
            self._log(4, "No password configured, skipping authentication")
            self._advance(SessionState.AUTHENTICATED)
            return

        self._log(4, "Authenticating with password")
        try:
            self._focus_password_field(page)
            page.keyboard.type(password)
            self._log(4, "Password entered")
            try:
                with page.expect_navigation(wait_until="networkidle", timeout=self.config.login_wait_timeout_ms):
                    page.keyboard.press("Enter")
                self._log(4, "Submitted password with Enter key")
            except PlaywrightTimeoutError:
                self._log(4, "No navigation after password submit, continuing...")
        except PlaywrightError as e:
            self._log(4, f"Password authentication skipped or failed: {e}")
        self._advance(SessionState.AUTHENTICATED)

    def _focus_password_field(self, page) -> bool:
        field = page.query_selector('input[type="password"]')
        if field is not None and field.is_visible():
            field.click()
            return True

        self._log(4, "No visible password input, using Tab navigation")
        for presses in range(1, self.config.password_tab_limit + 1):
            page.keyboard.press("Tab")
            page.wait_for_timeout(200)
            if page.evaluate(FOCUSED_TYPE_SCRIPT) == "password":
                self._log(4, f"Found password field after {presses} Tab presses")
                return True

        self._log(4, f"No password field after {self.config.password_tab_limit} Tab presses, typing into focused element")
        return False

    def _settle(self, page) -> None:
        # The page gives no signal when the document list has rendered
        self._checkpoint()
        self._log(5, f"Waiting {self.config.settle_seconds:g} seconds for content to load")
        page.wait_for_timeout(self.config.settle_seconds * 1000)

    def _harvest_links(self, page) -> List[DocumentRef]:
        self._checkpoint()
        self._log(6, "Detecting document links on page")
        anchors = page.eval_on_selector_all("a[href]", LINKS_SCRIPT) or []

        refs = []
        seen = set()
        for anchor in anchors:
            href = anchor.get("href") or ""
            if not is_document_link(href) or href in seen:
                continue
            seen.add(href)
            refs.append(DocumentRef(url=href, text=anchor.get("text") or "Unknown"))

        self._log(6, f"Found {len(refs)} document links")
        self._advance(SessionState.LINKS_HARVESTED)
        return refs

    def _download_all(self, context, result: ScrapeResult, now: datetime) -> None:
        week_start = ScheduleCalculator.week_start(now, publish_day=self.config.publish_day)
        self._log(7, f"Week start date calculated: {week_start.isoformat()}")
        self._advance(SessionState.DOWNLOADING)

        # One at a time: parallel requests can invalidate the login session
        for ref in result.document_refs:
            self._checkpoint()
            try:
                content = self._download(context, ref)
                self._log(7, f"Downloaded {ref.filename}: {len(content)} bytes")
                self.persist(DocumentCreate(
                    type=WEEKLY_MAILING,
                    year_group_id=None,
                    week_start_date=week_start,
                    filename=ref.filename,
                    mime_type="application/pdf",
                    file_size=len(content),
                    content_base64=base64.b64encode(content).decode("ascii"),
                    storage_url=ref.url
                ))
            except ScrapeCancelled:
                raise
            except Exception as e:
                self._log(7, f"Failed to process {ref.url}: {e}")
                continue
            result.processed += 1
            self._log(7, f"Stored: {ref.filename}")

    def _download(self, context, ref: DocumentRef) -> bytes:
        response = context.request.get(ref.url, timeout=self.config.navigation_timeout_ms)
        if not response.ok:
            raise AcquisitionError(f"HTTP {response.status} for {ref.url}")
        return response.body()

    # -------------------------------------------------------------------
    # Bookkeeping
    # -------------------------------------------------------------------

    def _checkpoint(self) -> None:
        if self._cancelled.is_set():
            raise ScrapeCancelled("Scrape cancelled")

    def _advance(self, state: SessionState) -> None:
        logger.debug("Session state %s -> %s", self.state.value, state.value)
        self.state = state

    def _log(self, step: int, message: str) -> None:
        self.log.append(LogStep(timestamp=datetime.utcnow().isoformat(), step=step, message=message))
        logger.info("[Step %d] %s", step, message)

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import weekly_reminders.models  # noqa: F401
from weekly_reminders import crud
from weekly_reminders.config import Settings
from weekly_reminders.database import Base


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def year_group(db):
    return crud.create_year_group(db, "Year 1", 1)


@pytest.fixture
def config(tmp_path) -> Settings:
    """Settings with no provider keys and no waiting in the scraper"""
    return Settings(
        _env_file=None,
        storage_dir=str(tmp_path / "storage"),
        settle_seconds=0,
        password_tab_limit=3,
        google_gemini_api_key="",
        anthropic_api_key="",
        kimi_api_key="",
        openrouter_api_key="",
        ollama_model="",
    )


class FakeResponse:
    def __init__(self, body: bytes = b"%PDF-1.4 fake", status: int = 200):
        self._body = body
        self.status = status
        self.ok = 200 <= status < 300

    def body(self) -> bytes:
        return self._body


class FakeRequest:
    """Stands in for BrowserContext.request; `responses` maps URL -> body or exception"""

    def __init__(self, responses):
        self.responses = responses
        self.fetched = []

    def get(self, url, timeout=None):
        self.fetched.append(url)
        outcome = self.responses.get(url, b"%PDF-1.4 fake")
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        return FakeResponse(outcome)


class FakeKeyboard:
    def __init__(self, page):
        self.page = page
        self.pressed = []
        self.typed = []

    def press(self, key):
        self.pressed.append(key)
        if key == "Tab":
            self.page.tab_presses += 1

    def type(self, text):
        self.typed.append(text)


class FakeNavigation:
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakePage:
    """
    Enough of a Playwright page for the acquisition session.

    `links` are the anchors on the page after login; `password_after_tabs`
    is the number of Tab presses that reach a password box hidden from
    query_selector (None when there is a visible one).
    """

    def __init__(self, links=None, goto_error=None, password_after_tabs=None):
        self.links = links or []
        self.goto_error = goto_error
        self.password_after_tabs = password_after_tabs
        self.tab_presses = 0
        self.keyboard = FakeKeyboard(self)
        self.visited = []
        self.clicked = []

    def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if self.goto_error:
            raise self.goto_error

    def wait_for_selector(self, selector, timeout=None, state=None):
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
        raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")

    def click(self, selector):
        self.clicked.append(selector)

    def wait_for_timeout(self, ms):
        pass

    def query_selector(self, selector):
        if self.password_after_tabs is None:
            return FakeElement(self)
        return None

    def evaluate(self, script):
        if self.password_after_tabs is not None and self.tab_presses >= self.password_after_tabs:
            return "password"
        return "text"

    def expect_navigation(self, wait_until=None, timeout=None):
        return FakeNavigation()

    def eval_on_selector_all(self, selector, script):
        return [{"href": href, "text": text} for href, text in self.links]


class FakeElement:
    def __init__(self, page):
        self.page = page

    def is_visible(self):
        return True

    def click(self):
        self.page.clicked.append('input[type="password"]')


class FakeContext:
    def __init__(self, responses=None):
        self.request = FakeRequest(responses or {})


class FakeBrowser:
    """Launcher double that records whether the browser was closed"""

    def __init__(self, page: FakePage, context: FakeContext = None):
        self.page = page
        self.context = context or FakeContext()
        self.launched = False
        self.closed = False

    @contextmanager
    def __call__(self, config):
        self.launched = True
        try:
            yield self.context, self.page
        finally:
            self.closed = True


@pytest.fixture
def fake_browser():
    def build(**kwargs):
        responses = kwargs.pop("responses", None)
        return FakeBrowser(FakePage(**kwargs), FakeContext(responses))
    return build

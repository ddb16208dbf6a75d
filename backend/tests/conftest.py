"""
Pytest configuration and fixtures for OLX Search tests.

The browser is replaced by an in-memory fake driven by HTML fixtures, so
tests run the real BrowserSession, OlxScraper and tool code without
launching Chromium.
"""

import pytest
from bs4 import BeautifulSoup
from fastapi.testclient import TestClient

from olx.base import Domain
from olx.crawlers.browser import BrowserSession
from olx.factory import ScraperFactory
from olx.scraper import OlxScraper


EMPTY_PAGE = '<html><body></body></html>'


# ============================================================
# FAKE PLAYWRIGHT
# ============================================================

class FakeWeb:
    """URL -> HTML table shared by every fake page, with a navigation log."""

    def __init__(self):
        self.pages = {}
        self.errors = {}
        self.navigations = []

    def add(self, url, html, status=200):
        self.pages[url] = (html, status)

    def fail(self, url, error):
        self.errors[url] = error

    def load(self, url):
        self.navigations.append(url)
        if url in self.errors:
            raise self.errors[url]
        return self.pages.get(url, (EMPTY_PAGE, 200))


class FakeResponse:
    def __init__(self, status):
        self.status = status


class FakePage:
    def __init__(self, web):
        self.web = web
        self.url = 'about:blank'
        self.html = EMPTY_PAGE
        self.goto_calls = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append({'url': url, 'wait_until': wait_until, 'timeout': timeout})
        html, status = self.web.load(url)
        self.url = url
        self.html = html
        return FakeResponse(status)

    async def wait_for_selector(self, selector, timeout=None):
        soup = BeautifulSoup(self.html, 'html.parser')
        if soup.select_one(selector) is None:
            raise TimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return True

    async def content(self):
        return self.html


class FakeContext:
    def __init__(self, web, options):
        self.web = web
        self.options = options
        self.default_timeout = None
        self.init_scripts = []
        self.pages = []
        self.closed = False

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        page = FakePage(self.web)
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, web):
        self.web = web
        self.contexts = []
        self.closed = False

    async def new_context(self, **options):
        context = FakeContext(self.web, options)
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, web, fail_with=None):
        self.web = web
        self.fail_with = fail_with
        self.launches = []
        self.browser = None

    async def launch(self, **options):
        self.launches.append(options)
        if self.fail_with is not None:
            raise self.fail_with
        self.browser = FakeBrowser(self.web)
        return self.browser


class FakePlaywright:
    def __init__(self, web, fail_with=None):
        self.chromium = FakeChromium(web, fail_with)
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakePlaywrightManager:
    """Stands in for async_playwright(): start() returns the driver."""

    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


def make_session(playwright, **kwargs):
    return BrowserSession(launcher=lambda: FakePlaywrightManager(playwright), **kwargs)


# ============================================================
# HTML FIXTURES
# ============================================================

def card_html(title='iPhone 13', href='/d/anuncio/iphone-13-IDabc123.html',
              price='500 €', location='Lisboa - Hoje', image_src='https://img.olx.pt/1.jpg',
              image_data_src=None):
    """One search result card in OLX markup. Pass None to leave a part out."""
    parts = ['<div data-cy="l-card">']
    if href is not None:
        parts.append(f'<a href="{href}">')
    if title is not None:
        parts.append(f'<div data-cy="ad-card-title"><h4>{title}</h4></div>')
    if href is not None:
        parts.append('</a>')
    if price is not None:
        parts.append(f'<p data-testid="ad-price">{price}</p>')
    if location is not None:
        parts.append(f'<p data-testid="location-date">{location}</p>')
    if image_src is not None or image_data_src is not None:
        attrs = ''
        if image_src is not None:
            attrs += f' src="{image_src}"'
        if image_data_src is not None:
            attrs += f' data-src="{image_data_src}"'
        parts.append(f'<img{attrs}>')
    parts.append('</div>')
    return ''.join(parts)


def search_html(cards=(), total=None, next_page=False, no_results=False):
    parts = ['<html><body>']
    if total is not None:
        parts.append(f'<span data-testid="total-count">Encontrámos {total} anúncios</span>')
    parts.extend(cards)
    if no_results:
        parts.append('<div data-cy="empty-state">Não encontrámos anúncios</div>')
    if next_page:
        parts.append('<a data-cy="pagination-forward" href="?page=2">Next</a>')
    parts.append('</body></html>')
    return ''.join(parts)


def detail_html(title='iPhone 13 Pro', price='650 €', description='Como novo, com caixa.',
                location='Lisboa, Arroios', seller_name='João', verified=True):
    parts = ['<html><body>']
    if title is not None:
        parts.append(f'<h1 data-testid="offer_title">{title}</h1>')
    if price is not None:
        parts.append(f'<div data-testid="ad-price-container"><h3>{price}</h3></div>')
    if description is not None:
        parts.append(f'<div data-testid="ad_description"><div>{description}</div></div>')
    if location is not None:
        parts.append(f'<div data-testid="map-aside-section"><p>{location}</p></div>')
    if seller_name is not None:
        parts.append(f'<h4 data-testid="user-profile-user-name">{seller_name}</h4>')
    if verified:
        parts.append('<div data-testid="trader-title">Utilizador verificado</div>')
    parts.append('</body></html>')
    return ''.join(parts)


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def web():
    """In-memory pages served to the fake browser."""
    return FakeWeb()


@pytest.fixture
def playwright(web):
    return FakePlaywright(web)


@pytest.fixture
async def session(playwright):
    """Started browser session backed by the fake driver."""
    browser_session = make_session(playwright)
    await browser_session.start()
    yield browser_session
    await browser_session.close()


@pytest.fixture
def delays():
    """Backoff delays requested by scrapers, in seconds."""
    return []


@pytest.fixture
def no_sleep(delays):
    """Sleep replacement that records the delay instead of waiting."""
    async def fake_sleep(seconds):
        delays.append(seconds)
    return fake_sleep


@pytest.fixture
def scraper(session, no_sleep):
    """olx.pt scraper on the fake browser."""
    return OlxScraper(Domain.PT, session, sleep=no_sleep)


@pytest.fixture
def factory(session, no_sleep):
    return ScraperFactory(session, sleep=no_sleep)


@pytest.fixture
def client(web):
    """Test client running the full app lifespan on the fake browser."""
    from api.main import create_app

    app = create_app(session=make_session(FakePlaywright(web)))
    with TestClient(app) as test_client:
        yield test_client

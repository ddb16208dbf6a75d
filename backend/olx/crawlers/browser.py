"""
Shared Playwright browser session.

One Chromium instance is launched per session and shared by every scraper.
Each operation gets its own short-lived BrowserContext, so cookies and
storage never leak between operations and a crashed page only takes down
its own context.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import async_playwright, Browser, Page

from ..errors import BrowserLaunchError, BrowserNotStartedError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'
)
DEFAULT_TIMEOUT_MS = 30000

LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--disable-dev-shm-usage',
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-background-timer-throttling',
    '--disable-backgrounding-occluded-windows',
    '--disable-renderer-backgrounding',
    '--disable-gpu',
]

# Hide the most common automation markers
STEALTH_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });
"""


class BrowserSession:
    """
    Owns the Playwright driver and one Chromium browser.

    Usage:
        async with BrowserSession() as session:
            async with session.page() as page:
                await page.goto('https://www.olx.pt')
    """

    CLEANUP_TIMEOUT = 2.0   # seconds per teardown step
    CONTEXT_CLOSE_TIMEOUT = 5.0

    def __init__(self, headless: bool = True, launcher=None):
        """
        Args:
            headless: Run Chromium without a window
            launcher: Factory returning a started-able Playwright manager;
                defaults to playwright's async_playwright
        """
        self.headless = headless
        self._launcher = launcher or async_playwright
        self._playwright = None
        self._browser: Optional[Browser] = None

    @property
    def is_started(self) -> bool:
        return self._browser is not None

    async def start(self) -> 'BrowserSession':
        """Launch the browser. Calling it again on a started session is a no-op."""
        if self._browser is not None:
            return self

        try:
            self._playwright = await self._launcher().start()
            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )
        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self.close()
            raise BrowserLaunchError(str(e), {'component': 'BrowserSession'}, e)

        logger.info("Browser session started")
        return self

    async def close(self):
        """Close the browser and stop the driver. Never raises."""
        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=self.CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=self.CLEANUP_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    @asynccontextmanager
    async def page(
        self,
        timeout_ms: Optional[int] = None,
        user_agent: Optional[str] = None,
    ) -> AsyncIterator[Page]:
        """
        Yield a page in a fresh, isolated context.

        The context is closed when the block exits, whatever the outcome.

        Args:
            timeout_ms: Default timeout for every page action
            user_agent: User agent for the context

        Raises:
            BrowserNotStartedError: If start() has not been called
        """
        if self._browser is None:
            raise BrowserNotStartedError()

        context = await self._browser.new_context(
            viewport={'width': 1920, 'height': 1080},
            user_agent=user_agent or DEFAULT_USER_AGENT,
            locale='en-US',
        )
        try:
            context.set_default_timeout(timeout_ms or DEFAULT_TIMEOUT_MS)
            await context.add_init_script(STEALTH_SCRIPT)
            page = await context.new_page()
            yield page
        finally:
            try:
                await asyncio.wait_for(context.close(), timeout=self.CONTEXT_CLOSE_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out")
            except Exception as e:
                logger.debug(f"Error closing context: {e}")

    async def __aenter__(self):
        """Async context manager entry."""
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

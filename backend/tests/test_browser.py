"""
Tests for the shared browser session.
"""

import pytest

from olx.crawlers.browser import DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT, BrowserSession
from olx.errors import BrowserLaunchError, BrowserNotStartedError

from conftest import FakePlaywright, make_session


class TestBrowserSessionLifecycle:
    """Test start and close."""

    async def test_start_launches_once(self, playwright):
        """Test that start is idempotent."""
        session = make_session(playwright)

        await session.start()
        await session.start()

        assert session.is_started
        assert len(playwright.chromium.launches) == 1
        assert playwright.chromium.launches[0]["headless"] is True

    async def test_close_releases_everything(self, playwright):
        """Test that close shuts the browser and stops the driver."""
        session = make_session(playwright)
        await session.start()

        await session.close()

        assert playwright.chromium.browser.closed
        assert playwright.stopped
        assert not session.is_started

    async def test_close_without_start(self, playwright):
        """Test that closing an unstarted session is harmless."""
        await make_session(playwright).close()

    async def test_launch_failure(self, web):
        """Test that a failed launch raises BrowserLaunchError and cleans up."""
        playwright = FakePlaywright(web, fail_with=RuntimeError("Executable doesn't exist"))
        session = make_session(playwright)

        with pytest.raises(BrowserLaunchError) as exc_info:
            await session.start()

        assert "Executable doesn't exist" in str(exc_info.value)
        assert playwright.stopped
        assert not session.is_started

    async def test_async_context_manager(self, playwright):
        """Test usage as an async context manager."""
        async with make_session(playwright) as session:
            assert session.is_started

        assert playwright.stopped

    def test_default_launcher(self):
        """Test that the real driver is used when no launcher is given."""
        from playwright.async_api import async_playwright

        assert BrowserSession()._launcher is async_playwright


class TestBrowserSessionPages:
    """Test the per-operation page context."""

    async def test_page_before_start(self, playwright):
        """Test that pages cannot be opened before start."""
        session = make_session(playwright)

        with pytest.raises(BrowserNotStartedError):
            async with session.page():
                pass

    async def test_page_context_options(self, session, playwright):
        """Test that each page gets a fresh context with defaults applied."""
        async with session.page() as page:
            assert page is not None

        context = playwright.chromium.browser.contexts[0]
        assert context.default_timeout == DEFAULT_TIMEOUT_MS
        assert context.options["user_agent"] == DEFAULT_USER_AGENT
        assert context.init_scripts
        assert context.closed

    async def test_page_custom_timeout_and_agent(self, session, playwright):
        """Test custom timeout and user agent."""
        async with session.page(timeout_ms=5000, user_agent="TestAgent/1.0"):
            pass

        context = playwright.chromium.browser.contexts[0]
        assert context.default_timeout == 5000
        assert context.options["user_agent"] == "TestAgent/1.0"

    async def test_context_closed_on_error(self, session, playwright):
        """Test that the context is closed when the block raises."""
        with pytest.raises(ValueError):
            async with session.page():
                raise ValueError("extraction blew up")

        assert playwright.chromium.browser.contexts[0].closed

    async def test_contexts_are_not_reused(self, session, playwright):
        """Test that every page gets its own context."""
        async with session.page():
            pass
        async with session.page():
            pass

        contexts = playwright.chromium.browser.contexts
        assert len(contexts) == 2
        assert contexts[0] is not contexts[1]

"""
Tests for text normalizers, HTML extractors and the retry coordinator.
"""

import pytest
from bs4 import BeautifulSoup

from olx.errors import ListingNotFoundError, NavigationError, is_retryable
from olx.utils import (
    backoff_delay,
    clean_text,
    extract_first_int,
    format_number_param,
    has_element,
    retry,
    select_attr,
    select_text,
    slugify,
)


class TestNormalizers:
    """Test text normalization helpers."""

    def test_clean_text(self):
        """Test whitespace collapsing."""
        assert clean_text("  iPhone   13\n Pro ") == "iPhone 13 Pro"
        assert clean_text(None) == ""

    def test_slugify_basic(self):
        """Test the default slug rules."""
        assert slugify("iPhone 13 Pro!") == "iphone-13-pro"
        assert slugify("  --Sofa_de  canto-- ") == "sofa-de-canto"
        assert slugify("") == ""

    def test_slugify_char_map(self):
        """Test that the character map is applied after lower-casing."""
        assert slugify("ŁÓDŹ", char_map={"ł": "l", "ó": "o", "ź": "z"}) == "lodz"

    def test_slugify_strip_accents(self):
        """Test accent stripping."""
        assert slugify("São João", strip_accents=True) == "sao-joao"
        assert slugify("São João") == "são-joão"

    def test_format_number_param(self):
        """Test that whole numbers drop the decimal part."""
        assert format_number_param(100) == "100"
        assert format_number_param(100.0) == "100"
        assert format_number_param(99.5) == "99.5"


class TestExtractors:
    """Test HTML extraction helpers."""

    @pytest.fixture
    def soup(self):
        return BeautifulSoup(
            '<div class="card">'
            '<h4>  Sofá   de canto </h4>'
            '<img data-src="https://img/lazy.jpg">'
            '<span class="count">Znaleźliśmy 1234 ogłoszeń</span>'
            '</div>',
            'html.parser',
        )

    def test_select_text(self, soup):
        """Test text extraction with whitespace cleanup."""
        assert select_text(soup, "h4") == "Sofá de canto"
        assert select_text(soup, "h5") == ""

    def test_select_attr_fallback(self, soup):
        """Test that later attributes are tried when earlier ones are missing."""
        assert select_attr(soup, "img", "src", "data-src") == "https://img/lazy.jpg"
        assert select_attr(soup, "video", "src") == ""

    def test_has_element(self, soup):
        """Test presence checks."""
        assert has_element(soup, ".count")
        assert not has_element(soup, ".missing")

    def test_extract_first_int(self):
        """Test integer extraction."""
        assert extract_first_int("Znaleźliśmy 1234 ogłoszeń") == 1234
        assert extract_first_int("no numbers here") == 0
        assert extract_first_int(None) == 0


class TestBackoff:
    """Test backoff delays."""

    def test_doubles_until_cap(self):
        """Test exponential growth capped at the maximum."""
        assert [backoff_delay(n, 1.0, 10.0) for n in range(1, 6)] == [1.0, 2.0, 4.0, 8.0, 10.0]

    def test_custom_base(self):
        """Test a custom base delay."""
        assert backoff_delay(3, 0.5, 10.0) == 2.0


class TestRetry:
    """Test the retry coordinator."""

    @pytest.fixture
    def sleeps(self):
        return []

    @pytest.fixture
    def fake_sleep(self, sleeps):
        async def sleep(seconds):
            sleeps.append(seconds)
        return sleep

    def flaky(self, failures, error_factory=lambda n: NavigationError(f"https://www.olx.pt/{n}")):
        """Operation that fails `failures` times, then returns 'ok'."""
        calls = []

        async def operation():
            calls.append(1)
            if len(calls) <= failures:
                raise error_factory(len(calls))
            return "ok"

        return operation, calls

    async def test_succeeds_first_time(self, fake_sleep, sleeps):
        """Test that a successful operation runs once."""
        operation, calls = self.flaky(0)

        assert await retry(operation, sleep=fake_sleep) == "ok"
        assert len(calls) == 1
        assert sleeps == []

    async def test_recovers_after_two_failures(self, fake_sleep, sleeps):
        """Test two failures then success with three attempts."""
        operation, calls = self.flaky(2)

        assert await retry(operation, max_attempts=3, sleep=fake_sleep) == "ok"
        assert len(calls) == 3
        assert sleeps == [1.0, 2.0]

    async def test_reraises_last_error(self, fake_sleep, sleeps):
        """Test that the final attempt's error is raised unchanged."""
        operation, calls = self.flaky(3)

        with pytest.raises(NavigationError) as exc_info:
            await retry(operation, max_attempts=3, sleep=fake_sleep)

        assert exc_info.value.url == "https://www.olx.pt/3"
        assert len(calls) == 3
        assert sleeps == [1.0, 2.0]

    async def test_should_retry_stops_early(self, fake_sleep, sleeps):
        """Test that errors rejected by the predicate are raised at once."""
        operation, calls = self.flaky(3, lambda n: ListingNotFoundError("abc"))

        with pytest.raises(ListingNotFoundError):
            await retry(operation, max_attempts=3, should_retry=is_retryable, sleep=fake_sleep)

        assert len(calls) == 1
        assert sleeps == []

    async def test_delay_cap(self, fake_sleep, sleeps):
        """Test that delays never exceed the cap."""
        operation, _ = self.flaky(4)

        await retry(operation, max_attempts=5, base_delay=3.0, max_delay=5.0, sleep=fake_sleep)

        assert sleeps == [3.0, 5.0, 5.0, 5.0]

    async def test_single_attempt(self, fake_sleep, sleeps):
        """Test that max_attempts=1 means no retry."""
        operation, calls = self.flaky(1)

        with pytest.raises(NavigationError):
            await retry(operation, max_attempts=1, sleep=fake_sleep)

        assert len(calls) == 1
        assert sleeps == []

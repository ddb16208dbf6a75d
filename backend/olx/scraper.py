"""
OLX scraper.

One OlxScraper serves one domain. It builds search URLs from the domain
config, runs every page visit in an isolated browser context, retries
page-level failures with backoff and extracts listings from the rendered
HTML with BeautifulSoup.
"""

import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union
from urllib.parse import urlencode, urljoin

from bs4 import BeautifulSoup

from .base import (
    Colors,
    Domain,
    Listing,
    Result,
    SearchFilters,
    SearchResult,
    SellerInfo,
)
from .cancellation import CancellationToken, check_cancelled
from .config import get_config, to_domain
from .crawlers.browser import BrowserSession, DEFAULT_TIMEOUT_MS, DEFAULT_USER_AGENT
from .errors import ListingNotFoundError, NavigationError, NetworkError, ValidationError, is_retryable
from .sites.handlers import get_locale_handler
from .utils.extractors import extract_first_int, has_element, select_attr, select_text
from .utils.normalizers import format_number_param
from .utils.retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_DELAY, retry

T = TypeVar('T')

PAGE_SIZE = 40                  # OLX shows 40 ads per results page on every market
RESULTS_WAIT_MS = 10000


class OlxScraper:
    """
    Search and detail retrieval for one OLX marketplace.

    Usage:
        scraper = OlxScraper(Domain.PT, session)
        result = await scraper.scrape(SearchFilters(domain=Domain.PT, query='iphone'))
        if result.success:
            for listing in result.data.listings:
                ...

    Public operations never raise; failures come back as Result.fail with
    the original error.
    """

    def __init__(
        self,
        domain: Union[Domain, str],
        session: BrowserSession,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_retries: int = 3,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
        retry_max_delay: float = DEFAULT_MAX_DELAY,
        user_agent: str = DEFAULT_USER_AGENT,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        """
        Args:
            domain: Marketplace to scrape
            session: Started browser session shared with other scrapers
            timeout_ms: Default timeout for every page action
            max_retries: Attempts per operation, including the first
            retry_base_delay: Backoff after the first failed attempt (seconds)
            retry_max_delay: Cap for a single backoff (seconds)
            user_agent: User agent for every browser context
            sleep: Awaitable sleep used between retries (asyncio.sleep by default)

        Raises:
            UnsupportedDomainError: If domain is not a supported marketplace
        """
        self.domain = to_domain(domain)
        self.config = get_config(self.domain)
        self.handler = get_locale_handler(self.domain)
        self.session = session
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.user_agent = user_agent
        self._sleep = sleep or asyncio.sleep

        # Listing id -> absolute URL of every ad seen in a search
        self._url_cache: Dict[str, str] = {}

        self.logger = logging.getLogger(f"scraper.{self.domain.value}")

    # ============================================================
    # PUBLIC HELPERS
    # ============================================================

    def validate_query(self, query: Any) -> bool:
        """Cheap shape check for a search query (SearchFilters or a plain dict)."""
        return isinstance(query, (SearchFilters, dict))

    def cached_url(self, listing_id: str) -> Optional[str]:
        return self._url_cache.get(listing_id)

    @property
    def cache_size(self) -> int:
        return len(self._url_cache)

    def build_search_url(self, filters: SearchFilters) -> str:
        """
        Build the results URL for a search.

        Examples (olx.pt):
            query='iPhone 13'                      -> https://www.olx.pt/ads/q-iphone-13/
            location='Lisboa', query='bicicleta',
            min_price=100, sort_by='price-asc'     -> https://www.olx.pt/lisboa/q-bicicleta/
                                                      ?search%5Bfilter_float_price%3Afrom%5D=100
                                                      &search%5Border%5D=filter_float_price%3Aasc
        """
        patterns = self.config.url_patterns
        path = patterns.search_path(filters.location, filters.query)

        params = []
        if filters.category:
            params.append((patterns.category_param, filters.category))
        if filters.min_price is not None and filters.min_price > 0:
            params.append((patterns.min_price_param, format_number_param(filters.min_price)))
        if filters.max_price is not None and filters.max_price > 0:
            params.append((patterns.max_price_param, format_number_param(filters.max_price)))
        if filters.sort_by and filters.sort_by != 'relevance':
            sort_value = patterns.sort_values.get(filters.sort_by)
            if sort_value:
                params.append((patterns.sort_param, sort_value))
        if filters.page and filters.page > 1:
            params.append((patterns.page_param, str(filters.page)))

        url = urljoin(self.config.base_url, path)
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    async def with_page(
        self,
        fn: Callable[[Any], Awaitable[T]],
        token: Optional[CancellationToken] = None,
    ) -> T:
        """
        Run fn(page) inside a fresh browser context.

        The context is always closed afterwards. No retries happen here.

        Raises:
            CancellationError: If the token is signaled before fn starts
        """
        async with self.session.page(timeout_ms=self.timeout_ms, user_agent=self.user_agent) as page:
            check_cancelled(token, 'withPage')
            return await fn(page)

    # ============================================================
    # SEARCH
    # ============================================================

    async def scrape(
        self,
        filters: Union[SearchFilters, Dict[str, Any]],
        token: Optional[CancellationToken] = None,
    ) -> Result[SearchResult]:
        """
        Search the marketplace.

        Args:
            filters: Validated search filters, or a dict of SearchFilters
                fields (the domain defaults to this scraper's)
            token: Optional cancellation token

        Returns:
            Result carrying a SearchResult, or the error that ended the search
        """
        try:
            check_cancelled(token, 'scrape')
            filters = self._to_filters(filters)
            url = self.build_search_url(filters)
            self.logger.info(f"{Colors.cyan('❯')} Searching {self.domain.value}: {Colors.gray(url)}")

            result = await self._retry(
                lambda: self.with_page(lambda page: self._search_page(page, url, filters, token), token),
                label=f"search on {self.domain.value}",
            )

            self.logger.info(
                f"   {Colors.green('✓')} {len(result.listings)} listing(s), "
                f"page {result.current_page}/{result.total_pages}"
            )
            return Result.ok(result)
        except Exception as e:
            self.logger.error(f"   {Colors.red('✘')} Search failed: {e}")
            return Result.fail(e)

    def _to_filters(self, query: Any) -> SearchFilters:
        if not self.validate_query(query):
            raise ValidationError(
                f"Search query must be SearchFilters or a dict, got {type(query).__name__}",
                {'operation': 'scrape'},
            )
        if isinstance(query, SearchFilters):
            return query
        try:
            return SearchFilters(**{'domain': self.domain, **query})
        except TypeError as e:
            raise ValidationError(str(e), {'operation': 'scrape'}, e)

    async def _search_page(
        self,
        page,
        url: str,
        filters: SearchFilters,
        token: Optional[CancellationToken],
    ) -> SearchResult:
        await self._navigate(page, url)
        await self._wait_for_results(page)
        check_cancelled(token, 'scrape')

        soup = BeautifulSoup(await page.content(), 'html.parser')
        listings = self._extract_listings(soup, filters.limit)
        return self._build_search_result(soup, listings, filters.page or 1)

    async def _wait_for_results(self, page):
        """
        Wait until either a result card or the no-results marker shows up.

        Whichever settles first ends the wait. Timeouts and failures are
        ignored; extraction then simply finds what is on the page.
        """
        selectors = self.config.selectors.search
        waits = [
            asyncio.ensure_future(page.wait_for_selector(selector, timeout=RESULTS_WAIT_MS))
            for selector in (selectors.listing_card, selectors.no_results)
        ]
        try:
            await asyncio.wait(waits, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in waits:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*waits, return_exceptions=True)

    def _extract_listings(self, soup: BeautifulSoup, limit: int) -> List[Listing]:
        """Parse result cards; cards without a title or link are skipped."""
        selectors = self.config.selectors.search
        listings = []

        for index, card in enumerate(soup.select(selectors.listing_card)):
            if len(listings) >= limit:
                break

            title = select_text(card, selectors.title)
            href = select_attr(card, selectors.link, 'href')
            if not title or not href:
                continue

            url = urljoin(self.config.base_url, href)
            listing_id = self.handler.extract_listing_id(url, index)
            self._url_cache[listing_id] = url

            listings.append(Listing(
                id=listing_id,
                title=title,
                url=url,
                price=select_text(card, selectors.price) or None,
                location=select_text(card, selectors.location) or None,
                image_url=select_attr(card, selectors.image, 'src', 'data-src') or None,
            ))

        return listings

    def _build_search_result(self, soup: BeautifulSoup, listings: List[Listing],
                             current_page: int) -> SearchResult:
        selectors = self.config.selectors.search
        total_count = extract_first_int(select_text(soup, selectors.total_count))

        return SearchResult(
            listings=listings,
            total_count=total_count,
            current_page=current_page,
            total_pages=max(1, math.ceil(total_count / PAGE_SIZE)),
            has_next_page=has_element(soup, selectors.next_page),
        )

    # ============================================================
    # LISTING DETAILS
    # ============================================================

    async def get_listing_details(
        self,
        listing_id: str,
        token: Optional[CancellationToken] = None,
    ) -> Result[Listing]:
        """
        Fetch the full record of one listing.

        The URL comes from the search cache when the listing was seen in an
        earlier search; otherwise the locale handler looks it up.

        Returns:
            Result carrying a Listing, or the error that ended the lookup
        """
        try:
            check_cancelled(token, 'getListingDetails')
            self.logger.info(f"{Colors.cyan('❯')} Fetching listing {Colors.bold(listing_id)} on {self.domain.value}")

            listing = await self._retry(
                lambda: self.with_page(lambda page: self._details_page(page, listing_id, token), token),
                label=f"listing {listing_id} on {self.domain.value}",
            )

            self.logger.info(f"   {Colors.green('✓')} {listing.title or listing_id}")
            return Result.ok(listing)
        except Exception as e:
            self.logger.error(f"   {Colors.red('✘')} Listing {listing_id} failed: {e}")
            return Result.fail(e)

    async def _details_page(self, page, listing_id: str,
                            token: Optional[CancellationToken]) -> Listing:
        url = self._url_cache.get(listing_id)
        if not url:
            self.logger.info(f"   {Colors.yellow('!')} Listing {listing_id} not cached, looking it up")
            url = await self.handler.find_listing_url(listing_id, page, self.config)
        if not url:
            raise ListingNotFoundError(listing_id, {'operation': 'getListingDetails'})

        await self._navigate(page, url)
        check_cancelled(token, 'getListingDetails')

        soup = BeautifulSoup(await page.content(), 'html.parser')
        selectors = self.config.selectors.detail

        return Listing(
            id=listing_id,
            title=select_text(soup, selectors.title),
            url=url,
            price=select_text(soup, selectors.price) or None,
            description=select_text(soup, selectors.description) or None,
            location=select_text(soup, selectors.location) or None,
            seller=self._extract_seller(soup),
        )

    def _extract_seller(self, soup: BeautifulSoup) -> Optional[SellerInfo]:
        """Seller block, or None when neither a name nor a badge is shown."""
        selectors = self.config.selectors.detail.seller
        name = select_text(soup, selectors.name)
        verified = has_element(soup, selectors.verified)

        if not name and not verified:
            return None
        return SellerInfo(name=name or None, verified=verified)

    # ============================================================
    # SHARED
    # ============================================================

    async def _navigate(self, page, url: str):
        """
        Load url and wait for the network to settle.

        Raises:
            NavigationError: If the browser could not load the page
            NetworkError: If the server answered with an error status
        """
        try:
            response = await page.goto(url, wait_until='networkidle')
        except Exception as e:
            raise NavigationError(url, str(e), {'component': type(self).__name__}, e)

        if response is not None and response.status >= 400:
            raise NetworkError(f"HTTP {response.status} for {url}", url=url, status=response.status)

    async def _retry(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        return await retry(
            operation,
            max_attempts=self.max_retries,
            base_delay=self.retry_base_delay,
            max_delay=self.retry_max_delay,
            should_retry=is_retryable,
            sleep=self._sleep,
            label=label,
        )

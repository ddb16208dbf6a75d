"""
Scraper Factory - one scraper per domain per browser session.

Scrapers keep a per-instance listing URL cache, so handing out the same
instance for a domain lets a details lookup reuse the URLs found by an
earlier search.
"""

import logging
from typing import Dict, Union

from .base import Domain
from .config import to_domain
from .crawlers.browser import BrowserSession
from .errors import UnsupportedDomainError
from .scraper import OlxScraper

logger = logging.getLogger(__name__)


class ScraperFactory:
    """
    Creates and caches OlxScraper instances.

    Usage:
        factory = ScraperFactory(session, max_retries=3)
        scraper = factory.get_scraper('olx.pt')
        factory.get_scraper(Domain.PT) is scraper   # True
    """

    def __init__(self, session: BrowserSession, **scraper_options):
        """
        Args:
            session: Browser session shared by every scraper
            **scraper_options: Keyword arguments passed to each OlxScraper
        """
        self.session = session
        self.scraper_options = scraper_options
        self._scrapers: Dict[Domain, OlxScraper] = {}

    def get_scraper(self, domain: Union[Domain, str]) -> OlxScraper:
        """
        Get the scraper for a domain, creating it on first use.

        Raises:
            UnsupportedDomainError: If domain is not supported
        """
        domain = to_domain(domain)
        scraper = self._scrapers.get(domain)
        if scraper is None:
            logger.debug(f"Creating scraper for {domain.value}")
            scraper = OlxScraper(domain, self.session, **self.scraper_options)
            self._scrapers[domain] = scraper
        return scraper

    create_scraper = get_scraper

    def has_scraper(self, domain: Union[Domain, str]) -> bool:
        try:
            return to_domain(domain) in self._scrapers
        except UnsupportedDomainError:
            return False

    def get_all_scrapers(self) -> Dict[Domain, OlxScraper]:
        """Copy of the cache; mutating it does not affect the factory."""
        return dict(self._scrapers)

    def clear_cache(self):
        """Drop every cached scraper. The browser session is left alone."""
        logger.debug(f"Clearing {len(self._scrapers)} cached scraper(s)")
        self._scrapers.clear()

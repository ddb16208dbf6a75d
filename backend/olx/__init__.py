"""
OLX scraping engine.

Searches and reads classified ads on the five OLX marketplaces
(olx.pt, olx.pl, olx.bg, olx.ro, olx.ua) through a shared Playwright
browser session.
"""

from .base import (
    Domain,
    DomainConfig,
    Listing,
    Result,
    SearchFilters,
    SearchResult,
    SellerInfo,
)
from .cancellation import CancellationToken
from .config import get_config, get_domain_summary, is_supported, list_supported_domains
from .crawlers.browser import BrowserSession
from .factory import ScraperFactory
from .scraper import OlxScraper

__all__ = [
    'Domain',
    'DomainConfig',
    'Listing',
    'Result',
    'SearchFilters',
    'SearchResult',
    'SellerInfo',
    'CancellationToken',
    'get_config',
    'get_domain_summary',
    'is_supported',
    'list_supported_domains',
    'BrowserSession',
    'ScraperFactory',
    'OlxScraper',
]

"""
Locale-specific procedures for the OLX marketplaces.

Everything that is plain data lives in the domain configs. The two
procedures that cannot be expressed as data (pulling a listing id out of a
URL and finding a listing URL from a bare id) are collected here, one
LocaleHandler per domain.
"""

import logging
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict
from urllib.parse import quote, urljoin

from bs4 import BeautifulSoup

from ..base import Domain, DomainConfig

logger = logging.getLogger(__name__)

LISTING_ID_PATTERN = re.compile(r'ID([A-Za-z0-9]+)\.html')

FIND_LISTING_TIMEOUT_MS = 15000


def fallback_listing_id(index: int = 0) -> str:
    """
    Millisecond timestamp plus the card index, used when a URL carries no
    recognizable id. The index keeps ids unique within one extraction pass.
    """
    return f"{int(time.time() * 1000)}-{index}"


def extract_olx_listing_id(url: str, index: int = 0) -> str:
    """
    Pull the listing id out of an OLX ad URL.

    Examples:
        '/d/anuncio/iphone-13-IDabc123.html'          -> 'abc123'
        'https://www.olx.pl/d/oferta/rower-CID5-IDxY9.html' -> 'xY9'
        '/d/anuncio/no-id-here', index=3              -> '<timestamp>-3'
    """
    match = LISTING_ID_PATTERN.search(url or '')
    if match:
        return match.group(1)
    return fallback_listing_id(index)


def _css_string(value: str) -> str:
    """Escape value for use inside a double-quoted CSS attribute selector."""
    return value.replace('\\', '\\\\').replace('"', '\\"')


async def find_olx_listing_url(listing_id: str, page, config: DomainConfig) -> str:
    """
    Search the marketplace for a listing id and return the matching ad URL.

    Args:
        listing_id: Id as produced by extract_olx_listing_id
        page: Open Playwright page to navigate with
        config: Domain config for the marketplace

    Returns:
        Absolute listing URL, or '' when nothing matched or anything failed
    """
    search_url = f"{config.base_url}{config.url_patterns.listing_path}q-{quote(listing_id, safe='')}/"
    link_selector = f'{config.selectors.search.listing_card} a[href*="ID{_css_string(listing_id)}"]'

    try:
        await page.goto(search_url, wait_until='networkidle', timeout=FIND_LISTING_TIMEOUT_MS)
        soup = BeautifulSoup(await page.content(), 'html.parser')
        link = soup.select_one(link_selector)
        if link is None or not link.get('href'):
            return ''
        return urljoin(config.base_url, link['href'])
    except Exception as e:
        logger.debug(f"Lookup of listing {listing_id} on {config.domain.value} failed: {e}")
        return ''


@dataclass(frozen=True)
class LocaleHandler:
    """The locale procedures for one domain."""
    extract_listing_id: Callable[..., str]
    find_listing_url: Callable[..., Awaitable[str]]


OLX_HANDLER = LocaleHandler(
    extract_listing_id=extract_olx_listing_id,
    find_listing_url=find_olx_listing_url,
)

# All five markets share one URL scheme today; a market that diverges gets
# its own LocaleHandler here.
LOCALE_HANDLERS: Dict[Domain, LocaleHandler] = {
    Domain.PT: OLX_HANDLER,
    Domain.PL: OLX_HANDLER,
    Domain.BG: OLX_HANDLER,
    Domain.RO: OLX_HANDLER,
    Domain.UA: OLX_HANDLER,
}


def get_locale_handler(domain: Domain) -> LocaleHandler:
    return LOCALE_HANDLERS[domain]

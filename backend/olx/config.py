"""
Domain configurations for the five OLX marketplaces.

Each domain has a DomainConfig that defines:
- Base URL, currency and language
- CSS selectors for search result cards and listing pages
- URL patterns (paths, query parameter names, slug rules)

Configs are built once at import time and never mutated.
"""

from typing import Dict, List, Union

from .base import (
    Domain,
    DomainConfig,
    DetailSelectors,
    SearchSelectors,
    Selectors,
    SellerSelectors,
    SlugRules,
    UrlPatterns,
)
from .errors import UnsupportedDomainError


# ============================================================
# SHARED SELECTORS
# OLX runs one frontend across markets; only PT differs on titles
# ============================================================

CARD_SELECTOR = '[data-cy="l-card"]'

DEFAULT_TITLE_SELECTOR = '[data-cy="ad-card-title"] h4, [data-cy="ad-card-title"] h6'


def _search_selectors(title: str = DEFAULT_TITLE_SELECTOR) -> SearchSelectors:
    return SearchSelectors(
        listing_card=CARD_SELECTOR,
        title=title,
        price='[data-testid="ad-price"]',
        location='[data-testid="location-date"]',
        image='img',
        link='a[href]',
        publish_date='[data-testid="location-date"] span:last-child',
        next_page='a[data-cy="pagination-forward"]',
        total_count='[data-testid="total-count"]',
        no_results='[data-cy="empty-state"]',
    )


DETAIL_SELECTORS = DetailSelectors(
    title='[data-testid="offer_title"]',
    price='[data-testid="ad-price-container"]',
    description='[data-testid="ad_description"]',
    images='.swiper-slide img',
    location='[data-testid="map-aside-section"]',
    publish_date='[data-testid="ad-posted-at"]',
    seller=SellerSelectors(
        name='[data-testid="user-profile-user-name"]',
        phone='[data-testid="phones-container"]',
        verified='[data-testid="trader-title"]',
        member_since='[data-testid="member-since"]',
    ),
    category='.breadcrumb-item:last-child',
    attributes='[data-cy="ad-params"] li',
)


# ============================================================
# SLUG RULES
# ============================================================

POLISH_CHAR_MAP = {
    'ą': 'a', 'ć': 'c', 'ę': 'e', 'ł': 'l', 'ń': 'n',
    'ó': 'o', 'ś': 's', 'ź': 'z', 'ż': 'z',
}

# Both comma-below and legacy cedilla forms appear in user input
ROMANIAN_CHAR_MAP = {
    'ă': 'a', 'â': 'a', 'î': 'i',
    'ș': 's', 'ş': 's', 'ț': 't', 'ţ': 't',
}

# Search order values are the same on every market
SORT_VALUES = {
    'date': 'created_at:desc',
    'price-asc': 'filter_float_price:asc',
    'price-desc': 'filter_float_price:desc',
}


def _url_patterns(listing_path: str, slug_rules: SlugRules) -> UrlPatterns:
    return UrlPatterns(
        listing_path=listing_path,
        category_param='c',
        page_param='page',
        min_price_param='search[filter_float_price:from]',
        max_price_param='search[filter_float_price:to]',
        sort_param='search[order]',
        sort_values=dict(SORT_VALUES),
        slug_rules=slug_rules,
    )


# ============================================================
# DOMAIN CONFIGURATIONS
# ============================================================

DOMAIN_CONFIGS: Dict[Domain, DomainConfig] = {
    Domain.PT: DomainConfig(
        domain=Domain.PT,
        base_url='https://www.olx.pt',
        currency='EUR',
        language='pt',
        selectors=Selectors(
            search=_search_selectors(title='[data-cy="ad-card-title"] h4'),
            detail=DETAIL_SELECTORS,
        ),
        url_patterns=_url_patterns('/ads/', SlugRules(strip_accents=True)),
    ),

    Domain.PL: DomainConfig(
        domain=Domain.PL,
        base_url='https://www.olx.pl',
        currency='PLN',
        language='pl',
        selectors=Selectors(search=_search_selectors(), detail=DETAIL_SELECTORS),
        url_patterns=_url_patterns('/oferty/', SlugRules(char_map=POLISH_CHAR_MAP)),
    ),

    Domain.BG: DomainConfig(
        domain=Domain.BG,
        base_url='https://www.olx.bg',
        currency='BGN',
        language='bg',
        selectors=Selectors(search=_search_selectors(), detail=DETAIL_SELECTORS),
        url_patterns=_url_patterns('/ads/', SlugRules()),
    ),

    Domain.RO: DomainConfig(
        domain=Domain.RO,
        base_url='https://www.olx.ro',
        currency='RON',
        language='ro',
        selectors=Selectors(search=_search_selectors(), detail=DETAIL_SELECTORS),
        url_patterns=_url_patterns('/ads/', SlugRules(char_map=ROMANIAN_CHAR_MAP)),
    ),

    Domain.UA: DomainConfig(
        domain=Domain.UA,
        base_url='https://www.olx.ua',
        currency='UAH',
        language='uk',
        selectors=Selectors(search=_search_selectors(), detail=DETAIL_SELECTORS),
        url_patterns=_url_patterns('/ads/', SlugRules()),
    ),
}


# ============================================================
# HELPER FUNCTIONS
# ============================================================

def is_supported(candidate: str) -> bool:
    """Check untrusted input before treating it as a Domain."""
    return any(candidate == domain.value for domain in DOMAIN_CONFIGS)


def to_domain(domain: Union[Domain, str]) -> Domain:
    """
    Coerce a string or Domain into a Domain.

    Raises:
        UnsupportedDomainError: If the value is not one of the supported domains
    """
    if isinstance(domain, Domain):
        return domain
    if isinstance(domain, str) and is_supported(domain):
        return Domain(domain)
    raise UnsupportedDomainError(domain)


def get_config(domain: Union[Domain, str]) -> DomainConfig:
    """
    Get configuration for a domain.

    Args:
        domain: Domain member or its value (e.g., 'olx.pt')

    Returns:
        DomainConfig for the domain

    Raises:
        UnsupportedDomainError: If the domain is not supported
    """
    return DOMAIN_CONFIGS[to_domain(domain)]


def list_supported_domains() -> List[Domain]:
    """List all supported domains."""
    return list(DOMAIN_CONFIGS.keys())


def get_domain_summary() -> list:
    """Get a summary of all domains for display."""
    summary = []
    for domain, config in DOMAIN_CONFIGS.items():
        summary.append({
            'domain': domain.value,
            'base_url': config.base_url,
            'currency': config.currency,
            'language': config.language,
        })
    return summary

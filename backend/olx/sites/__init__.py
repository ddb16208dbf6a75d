"""Locale handlers keyed by domain."""

from .handlers import (
    LocaleHandler,
    LOCALE_HANDLERS,
    get_locale_handler,
    extract_olx_listing_id,
    find_olx_listing_url,
)

__all__ = [
    'LocaleHandler',
    'LOCALE_HANDLERS',
    'get_locale_handler',
    'extract_olx_listing_id',
    'find_olx_listing_url',
]

"""Shared utilities for the OLX scrapers."""

from .normalizers import (
    clean_text,
    slugify,
    format_number_param,
)
from .extractors import (
    select_text,
    select_attr,
    has_element,
    extract_first_int,
)
from .retry import retry, backoff_delay

__all__ = [
    'clean_text',
    'slugify',
    'format_number_param',
    'select_text',
    'select_attr',
    'has_element',
    'extract_first_int',
    'retry',
    'backoff_delay',
]

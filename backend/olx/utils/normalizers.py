"""
Text normalization utilities for the OLX scrapers.

These functions turn scraped or user-supplied text into consistent forms.
"""

import re
import unicodedata
from typing import Dict, Optional, Union


def clean_text(text: Optional[str]) -> str:
    """
    Collapse runs of whitespace and trim.

    Examples:
        '  iPhone   13\\n Pro ' -> 'iPhone 13 Pro'
        None -> ''
    """
    if not text:
        return ''
    return ' '.join(text.split())


def slugify(text: Optional[str], char_map: Optional[Dict[str, str]] = None,
            strip_accents: bool = False) -> str:
    """
    Convert free text into an OLX path segment.

    Lower-cases, folds locale letters through char_map, optionally strips
    accents, drops anything that is not a letter, digit, space or hyphen and
    collapses separators into single hyphens.

    Examples:
        'iPhone 13 Pro!'                  -> 'iphone-13-pro'
        'Łódź' with the Polish map        -> 'lodz'
        'São Paulo' with strip_accents    -> 'sao-paulo'
        'телефон Samsung'                 -> 'телефон-samsung'
    """
    if not text:
        return ''

    slug = text.strip().lower()
    if char_map:
        slug = slug.translate(str.maketrans(char_map))
    if strip_accents:
        slug = ''.join(
            ch for ch in unicodedata.normalize('NFKD', slug)
            if not unicodedata.combining(ch)
        )

    slug = re.sub(r'[^\w\s-]', '', slug)
    slug = re.sub(r'[\s_-]+', '-', slug)
    return slug.strip('-')


def format_number_param(value: Union[int, float]) -> str:
    """
    Render a number for a query string without a trailing '.0'.

    Examples:
        100 -> '100'
        100.0 -> '100'
        99.5 -> '99.5'
    """
    if float(value).is_integer():
        return str(int(value))
    return str(value)

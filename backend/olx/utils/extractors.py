"""
HTML extraction helpers.

Each helper tolerates a missing element and returns an empty value instead
of raising, so one bad selector never fails a whole page.
"""

import re
from typing import Optional, Union

from bs4 import BeautifulSoup, Tag

from .normalizers import clean_text

Node = Union[BeautifulSoup, Tag]


def select_text(node: Node, selector: str) -> str:
    """Text of the first element matching selector, or ''."""
    element = node.select_one(selector)
    if element is None:
        return ''
    return clean_text(element.get_text(' '))


def select_attr(node: Node, selector: str, *attrs: str) -> str:
    """
    First non-empty attribute among attrs on the first matching element.

    Example:
        select_attr(card, 'img', 'src', 'data-src')
    """
    element = node.select_one(selector)
    if element is None:
        return ''
    for attr in attrs:
        value = element.get(attr)
        if isinstance(value, list):
            value = ' '.join(value)
        if value:
            return value.strip()
    return ''


def has_element(node: Node, selector: str) -> bool:
    return node.select_one(selector) is not None


def extract_first_int(text: Optional[str], default: int = 0) -> int:
    """
    First run of digits in text as an int.

    Examples:
        'Znaleźliśmy 1234 ogłoszeń' -> 1234
        'Encontrámos 2 anúncios'    -> 2
        'no numbers here'           -> 0
    """
    if not text:
        return default
    match = re.search(r'(\d+)', text)
    if not match:
        return default
    return int(match.group(1))

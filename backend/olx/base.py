"""
Data structures shared by the OLX scraping engine.

This module defines the domain enum, the per-domain configuration records,
the listing/search records returned to callers and the Result wrapper that
every public operation returns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

from .errors import UnexpectedError
from .utils.normalizers import slugify

T = TypeVar('T')


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


class Domain(str, Enum):
    """Supported OLX marketplaces."""
    PT = "olx.pt"
    PL = "olx.pl"
    BG = "olx.bg"
    RO = "olx.ro"
    UA = "olx.ua"


SORT_MODES = ('relevance', 'date', 'price-asc', 'price-desc')


@dataclass(frozen=True)
class SearchSelectors:
    """CSS selectors for the search results page."""
    listing_card: str
    title: str
    price: str
    location: str
    image: str
    link: str
    publish_date: str
    next_page: str
    total_count: str
    no_results: str


@dataclass(frozen=True)
class SellerSelectors:
    name: str
    phone: str
    verified: str
    member_since: str


@dataclass(frozen=True)
class DetailSelectors:
    """CSS selectors for a single listing page."""
    title: str
    price: str
    description: str
    images: str
    location: str
    publish_date: str
    seller: SellerSelectors
    category: str
    attributes: str


@dataclass(frozen=True)
class Selectors:
    search: SearchSelectors
    detail: DetailSelectors


@dataclass(frozen=True)
class SlugRules:
    """
    How a locale turns free text into a URL path segment.

    char_map folds locale letters that Unicode decomposition does not
    handle (e.g. Polish 'ł'); strip_accents drops combining marks after
    NFKD decomposition.
    """
    char_map: Dict[str, str] = field(default_factory=dict)
    strip_accents: bool = False


@dataclass(frozen=True)
class UrlPatterns:
    """URL templates and query parameter names for one domain."""
    listing_path: str                   # Flat listing path, e.g. '/ads/'
    category_param: str
    page_param: str
    min_price_param: str
    max_price_param: str
    sort_param: str
    sort_values: Dict[str, str]         # sort mode -> parameter value
    slug_rules: SlugRules = field(default_factory=SlugRules)

    def slug(self, text: str) -> str:
        return slugify(text, self.slug_rules.char_map, self.slug_rules.strip_accents)

    def search_path(self, location: Optional[str] = None, query: Optional[str] = None) -> str:
        """
        Build the search path for an optional location and query.

        Examples:
            ('Lisboa', 'iPhone 13') -> /lisboa/q-iphone-13/
            ('Lisboa', None)        -> /lisboa/
            (None, 'iPhone 13')     -> /ads/q-iphone-13/
            (None, None)            -> /ads/
        """
        location_slug = self.slug(location) if location else ''
        query_slug = self.slug(query) if query else ''

        path = f"/{location_slug}/" if location_slug else self.listing_path
        if query_slug:
            path += f"q-{query_slug}/"
        return path


@dataclass(frozen=True)
class DomainConfig:
    """Everything the engine knows about one OLX marketplace."""
    domain: Domain
    base_url: str
    currency: str
    language: str
    selectors: Selectors
    url_patterns: UrlPatterns


@dataclass
class SellerInfo:
    name: Optional[str] = None
    phone: Optional[str] = None
    verified: Optional[bool] = None
    member_since: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'phone': self.phone,
            'verified': self.verified,
            'memberSince': self.member_since.isoformat() if self.member_since else None,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class Listing:
    """A single classified ad."""
    id: str
    title: str
    url: str
    price: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None
    description: Optional[str] = None
    seller: Optional[SellerInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'title': self.title,
            'price': self.price,
            'location': self.location,
            'category': self.category,
            'imageUrl': self.image_url,
            'url': self.url,
            'publishedAt': self.published_at.isoformat() if self.published_at else None,
            'description': self.description,
            'seller': self.seller.to_dict() if self.seller else None,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class SearchFilters:
    """Validated search parameters for one call."""
    domain: Domain
    query: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    page: int = 1
    limit: int = 20
    sort_by: str = 'relevance'


@dataclass
class SearchResult:
    listings: List[Listing] = field(default_factory=list)
    total_count: int = 0
    current_page: int = 1
    total_pages: int = 1
    has_next_page: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'listings': [listing.to_dict() for listing in self.listings],
            'totalCount': self.total_count,
            'currentPage': self.current_page,
            'totalPages': self.total_pages,
            'hasNextPage': self.has_next_page,
        }


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success carrying data, or failure carrying an error."""
    success: bool
    data: Optional[T] = None
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, data: T) -> 'Result[T]':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Union[Exception, str]) -> 'Result[T]':
        if not isinstance(error, Exception):
            error = UnexpectedError(str(error))
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the data, or raise the carried error."""
        if not self.success:
            raise self.error
        return self.data

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            data = self.data.to_dict() if hasattr(self.data, 'to_dict') else self.data
            return {'success': True, 'data': data}
        error = self.error.to_dict() if hasattr(self.error, 'to_dict') else {
            'name': type(self.error).__name__,
            'message': str(self.error),
        }
        return {'success': False, 'error': error}

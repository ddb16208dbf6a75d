"""
Input models for the tool operations.

Field names follow the camelCase wire format through aliases; Python code
uses the snake_case attribute names.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_core import PydanticCustomError

from olx.base import Domain, SearchFilters


SortMode = Literal['relevance', 'date', 'price-asc', 'price-desc']


class ToolArgs(BaseModel):
    """Base for tool argument models."""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class SearchListingsArgs(ToolArgs):
    domain: Domain
    query: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = None
    location: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0, alias='minPrice')
    max_price: Optional[float] = Field(None, ge=0, alias='maxPrice')
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=50)
    sort_by: SortMode = Field('relevance', alias='sortBy')

    @model_validator(mode='after')
    def check_search_rules(self):
        # Cross-field rules, reported as one error
        problems = []
        if self.min_price and self.max_price and self.max_price < self.min_price:
            problems.append('maxPrice: Max price must be greater than or equal to min price')
        if not (self.query or self.category or self.location):
            problems.append('query: At least one of query, category, or location must be provided')

        if problems:
            raise PydanticCustomError('search_rules', '{problems}', {'problems': ', '.join(problems)})
        return self

    def to_filters(self) -> SearchFilters:
        return SearchFilters(
            domain=self.domain,
            query=self.query,
            category=self.category,
            location=self.location,
            min_price=self.min_price,
            max_price=self.max_price,
            page=self.page,
            limit=self.limit,
            sort_by=self.sort_by,
        )


class GetListingDetailsArgs(ToolArgs):
    domain: Domain
    # OLX ids are alphanumeric; extraction fallbacks add a "-<index>" suffix
    listing_id: str = Field(..., min_length=1, pattern=r'^[A-Za-z0-9-]+$', alias='listingId')
    # Accepted for compatibility; extraction always returns the same fields
    include_images: bool = Field(False, alias='includeImages')
    include_seller_info: bool = Field(True, alias='includeSellerInfo')

"""
Tool operations exposed by the server.

Every tool goes through BaseTool.execute, which checks cancellation,
validates the raw arguments against the tool's input model and turns
whatever the implementation raises into a failed Result.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from olx.base import Listing, Result, SearchResult
from olx.cancellation import CancellationToken, is_cancelled
from olx.errors import CancellationError, ValidationError, wrap_error
from olx.factory import ScraperFactory

from .schemas import GetListingDetailsArgs, SearchListingsArgs

logger = logging.getLogger(__name__)


def format_validation_errors(error: PydanticValidationError) -> str:
    """
    One line listing every violated field and its rule.

    Example:
        'limit: Input should be less than or equal to 50, page: Input should be greater than or equal to 1'
    """
    parts = []
    for err in error.errors():
        path = '.'.join(str(p) for p in err['loc'])
        parts.append(f"{path}: {err['msg']}" if path else err['msg'])
    return ', '.join(parts)


class BaseTool(ABC):
    """
    Abstract base class for all tools.

    Subclasses must set:
    - name: Tool name used for lookup and dispatch
    - description: Human readable summary
    - input_model: Pydantic model the raw arguments are validated against

    and implement execute_impl().
    """

    name: str = ''
    description: str = ''
    input_model: Type[BaseModel]

    @abstractmethod
    async def execute_impl(self, args: BaseModel, token: Optional[CancellationToken] = None) -> Any:
        """
        Run the tool on validated arguments.

        Raise on failure; execute() converts the error into a Result.
        """
        pass

    async def execute(self, raw_args: Any, token: Optional[CancellationToken] = None) -> Result:
        """
        Validate raw_args and run the tool.

        Args:
            raw_args: Untrusted arguments (usually a decoded JSON object)
            token: Optional cancellation token

        Returns:
            Result with the tool output, or a failure carrying the error
        """
        if is_cancelled(token):
            return Result.fail(CancellationError(self.name))

        try:
            args = self.input_model.model_validate(raw_args if raw_args is not None else {})
        except PydanticValidationError as e:
            return Result.fail(ValidationError(format_validation_errors(e), {'operation': self.name}))

        try:
            return Result.ok(await self.execute_impl(args, token))
        except Exception as e:
            logger.debug(f"Tool {self.name} failed: {e}")
            return Result.fail(wrap_error(e, self.name, type(self).__name__))

    def input_schema(self) -> Dict[str, Any]:
        """JSON schema of the input model, using the wire (camelCase) names."""
        return self.input_model.model_json_schema(by_alias=True)

    def to_definition(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'inputSchema': self.input_schema(),
        }


class SearchListingsTool(BaseTool):
    name = 'searchListings'
    description = (
        'Search for listings on OLX domains (olx.pt, olx.pl, olx.bg, olx.ro, olx.ua) '
        'with filters for query, category, location, price range, page and sort order'
    )
    input_model = SearchListingsArgs

    def __init__(self, factory: ScraperFactory):
        self.factory = factory

    async def execute_impl(self, args: SearchListingsArgs,
                           token: Optional[CancellationToken] = None) -> SearchResult:
        scraper = self.factory.get_scraper(args.domain)
        result = await scraper.scrape(args.to_filters(), token)
        return result.unwrap()


class GetListingDetailsTool(BaseTool):
    name = 'getListingDetails'
    description = (
        'Get detailed information about a specific OLX listing from any supported domain '
        '(olx.pt, olx.pl, olx.bg, olx.ro, olx.ua) including description and seller info'
    )
    input_model = GetListingDetailsArgs

    def __init__(self, factory: ScraperFactory):
        self.factory = factory

    async def execute_impl(self, args: GetListingDetailsArgs,
                           token: Optional[CancellationToken] = None) -> Listing:
        scraper = self.factory.get_scraper(args.domain)
        result = await scraper.get_listing_details(args.listing_id, token)
        return result.unwrap()

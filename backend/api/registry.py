"""
Tool Registry - name to tool lookup for the server.
"""

import logging
from typing import Dict, List, Optional

from olx.factory import ScraperFactory

from .tools import BaseTool, GetListingDetailsTool, SearchListingsTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Holds the tools the server exposes, in registration order.

    Usage:
        registry = ToolRegistry()
        registry.register(SearchListingsTool(factory)).register(GetListingDetailsTool(factory))
        tool = registry.get('searchListings')
    """

    def __init__(self):
        self._tools: Dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> 'ToolRegistry':
        """
        Add a tool. Returns the registry so calls can be chained.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool {tool.name} already registered")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool {tool.name}")
        return self

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        return name in self._tools

    def get_all_tools(self) -> List[BaseTool]:
        return list(self._tools.values())

    def get_tool_names(self) -> List[str]:
        return list(self._tools.keys())

    def has_tools(self) -> bool:
        return bool(self._tools)

    def unregister(self, name: str) -> bool:
        """Remove a tool. Returns False if it was not registered."""
        return self._tools.pop(name, None) is not None

    def clear(self):
        self._tools.clear()


def build_registry(factory: ScraperFactory) -> ToolRegistry:
    """Registry with every tool the server exposes."""
    return (
        ToolRegistry()
        .register(SearchListingsTool(factory))
        .register(GetListingDetailsTool(factory))
    )

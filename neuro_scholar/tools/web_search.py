"""General web search used as the secondary literature backend."""

import logging
from typing import Any

from langchain_tavily import TavilySearch

from neuro_scholar.config import settings

logger = logging.getLogger(__name__)


class TavilyWebSearch:
    """Thin async wrapper over the Tavily search tool.
    
    Results are returned as plain ``{"title", "url", "snippet"}`` dicts so
    the search gateway does not depend on Tavily's response shape.
    """
    
    def __init__(self, api_key: str | None = None, max_results: int = 10):
        self.api_key = settings.tavily_api_key if api_key is None else api_key
        self.max_results = max_results
        self._tool: TavilySearch | None = None
    
    @property
    def available(self) -> bool:
        return bool(self.api_key)
    
    def _get_tool(self) -> TavilySearch:
        if self._tool is None:
            self._tool = TavilySearch(
                max_results=self.max_results,
                tavily_api_key=self.api_key,
            )
        return self._tool
    
    async def search(self, query: str) -> list[dict[str, str]]:
        """Run one web search.
        
        Args:
            query: Search text
            
        Returns:
            List of result dicts with title, url and snippet.
        """
        if not self.available:
            return []
        response: Any = await self._get_tool().ainvoke({"query": query})
        if isinstance(response, str):
            # The tool reports errors as text instead of raising.
            logger.warning(f"SEARCH: Tavily returned no structured results: {response[:200]}")
            return []
        items = response.get("results", []) if isinstance(response, dict) else []
        return [
            {
                "title": item.get("title", "") or "",
                "url": item.get("url", "") or "",
                "snippet": item.get("content", "") or item.get("snippet", "") or "",
            }
            for item in items
        ]

"""Headlines API data source.

Talks to a GNews-style ``top-headlines`` endpoint over httpx. Pages are
numbered from 1; the cursor handed back to the paginator is the page
number as a string.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx
from pydantic import BaseModel, ValidationError

from .models import (
    END_OF_PAGES,
    Article,
    FilterCriteria,
    LoadDirection,
    Page,
    PageToken,
)
from .sources import DataSource, SourceError

logger = logging.getLogger(__name__)


class ApiSource(BaseModel):
    """Publisher block of an API article."""

    name: str = ""
    url: Optional[str] = None


class ApiArticle(BaseModel):
    """Article as returned by the headlines endpoint."""

    title: str
    url: str
    description: Optional[str] = None
    image: Optional[str] = None
    publishedAt: Optional[datetime] = None
    source: ApiSource = ApiSource()


class HeadlinesResponse(BaseModel):
    """Response body of the headlines endpoint."""

    totalArticles: int = 0
    articles: list[ApiArticle] = []


class NewsApiSource(DataSource):
    """
    Fetches top headlines for a category and language.

    The httpx client is created lazily and reused across fetches. Pass
    ``client`` to inject one (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://gnews.io/api/v4",
        page_size: int = 20,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize API source.

        Args:
            api_key: API key sent as the ``apikey`` query parameter
            base_url: Base URL of the API
            page_size: Articles requested per page
            timeout: Request timeout in seconds
            client: Optional preconfigured AsyncClient
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def fetch(
        self,
        criteria: FilterCriteria,
        direction: LoadDirection,
        cursor: Optional[PageToken],
    ) -> Page:
        page_number = self._page_number(cursor)
        params = {
            "category": criteria.category,
            "lang": criteria.language,
            "max": self.page_size,
            "page": page_number,
            "apikey": self.api_key,
        }

        try:
            response = await self.client.get(
                f"{self.base_url}/top-headlines", params=params
            )
            response.raise_for_status()
            data = HeadlinesResponse.model_validate(response.json())
        except httpx.HTTPError as e:
            raise SourceError(f"Headlines request failed: {e}") from e
        except (ValidationError, ValueError) as e:
            raise SourceError(f"Unexpected headlines response: {e}") from e

        logger.debug(
            "[API] %s %s page %d: %d articles (total %d)",
            criteria,
            direction.value,
            page_number,
            len(data.articles),
            data.totalArticles,
        )

        has_more = page_number * self.page_size < data.totalArticles
        return Page(
            items=tuple(self._to_article(a) for a in data.articles),
            next_token=str(page_number + 1) if has_more else END_OF_PAGES,
            prev_token=str(page_number - 1) if page_number > 1 else END_OF_PAGES,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _page_number(self, cursor: Optional[PageToken]) -> int:
        if cursor is None:
            return 1
        if cursor is END_OF_PAGES:
            raise SourceError("Cannot fetch past the last page")
        try:
            number = int(cursor)
        except ValueError as e:
            raise SourceError(f"Malformed cursor: {cursor!r}") from e
        if number < 1:
            raise SourceError(f"Page numbers start at 1, got {number}")
        return number

    @staticmethod
    def _to_article(item: ApiArticle) -> Article:
        return Article(
            title=item.title,
            link=item.url,
            summary=item.description or "",
            published=item.publishedAt,
            source=item.source.name,
            image_url=item.image,
        )

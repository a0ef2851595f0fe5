import logging
from typing import Sequence

import httpx

from link2json.errors import FetchError
from link2json.schemas.metadata import MetadataRecord
from link2json.services.cache import ResponseCache
from link2json.services.extractor import (
    FieldMatcher,
    HTMLFieldExtractor,
    page_matchers,
    site_name_fallback_matchers,
)
from link2json.services.urls import base_domain

logger = logging.getLogger(__name__)


class MetadataFetcher:
    """Fetches a page, extracts its link-preview metadata and caches the result."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: ResponseCache,
        user_agent: str,
    ) -> None:
        self.client = client
        self.cache = cache
        self.user_agent = user_agent

    async def fetch(self, url: str) -> MetadataRecord:
        """
        Return metadata for `url`, from cache when possible.

        On a miss the page is scanned once; if it carries no og:site_name the
        domain root is fetched and its og:title used instead. Raises FetchError
        if either fetch fails; nothing is cached in that case.
        """
        cached = self.cache.get(url)
        if cached is not None:
            logger.info("Cache hit %s", url)
            return cached

        record = MetadataRecord(url=url, domain=base_domain(url))
        await self._scan(url, page_matchers(), record)

        if not record.sitename and record.domain:
            await self._scan(record.domain, site_name_fallback_matchers(), record)

        self.cache.set(url, record)
        return record

    async def _scan(
        self,
        target: str,
        matchers: Sequence[FieldMatcher],
        record: MetadataRecord,
    ) -> None:
        """Stream `target` through one extractor pass writing into `record`."""
        logger.info("Visiting %s", target)
        extractor = HTMLFieldExtractor(matchers, record)
        try:
            async with self.client.stream(
                "GET",
                target,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
            ) as response:
                if not response.is_success:
                    raise FetchError(f"{target} returned HTTP {response.status_code}")
                async for chunk in response.aiter_text():
                    extractor.feed(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Failed to visit %s: %s", target, exc)
            raise FetchError(f"{target}: {exc}") from exc
        except FetchError as exc:
            logger.error("Failed to visit %s: %s", target, exc)
            raise
        extractor.close()
        logger.info("Scraping finished %s", target)

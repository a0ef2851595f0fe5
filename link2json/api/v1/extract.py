import logging
import time
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from link2json.api.deps import get_fetcher, get_rate_limiter
from link2json.errors import RateLimitError
from link2json.schemas import MetadataRecord
from link2json.services.metadata import MetadataFetcher
from link2json.services.rate_limit import TokenBucket
from link2json.services.urls import validate_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extract"])


@router.get("/extract", response_model=MetadataRecord)
async def extract(
    limiter: Annotated[TokenBucket, Depends(get_rate_limiter)],
    fetcher: Annotated[MetadataFetcher, Depends(get_fetcher)],
    url: Annotated[Optional[str], Query()] = None,
) -> MetadataRecord:
    """Fetch a page and return its title, description, site name, favicon and og:image."""
    if not limiter.allow():
        logger.info("Rate limit exceeded, rejecting %s", url)
        raise RateLimitError()

    started = time.perf_counter()
    url = validate_url(url)
    metadata = await fetcher.fetch(url)
    metadata.duration = int((time.perf_counter() - started) * 1000)
    return metadata

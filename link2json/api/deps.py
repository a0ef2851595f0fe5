from fastapi import Request

from link2json.services.cache import ResponseCache
from link2json.services.metadata import MetadataFetcher
from link2json.services.rate_limit import TokenBucket


# Components are built once in the application lifespan and shared by every
# request; tests swap them through app.dependency_overrides.
def get_cache(request: Request) -> ResponseCache:
    return request.app.state.cache


def get_rate_limiter(request: Request) -> TokenBucket:
    return request.app.state.rate_limiter


def get_fetcher(request: Request) -> MetadataFetcher:
    return request.app.state.fetcher

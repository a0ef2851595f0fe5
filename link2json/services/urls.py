"""URL validation and base-domain helpers."""

from typing import Annotated
from urllib.parse import urljoin, urlsplit

from pydantic import AnyUrl, TypeAdapter, UrlConstraints, ValidationError

from link2json.errors import InvalidURLError, URLRequiredError

# Absolute http(s) URL with a host and no length cap.
_http_url = TypeAdapter(
    Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]
)


def validate_url(url: str | None) -> str:
    """
    Return `url` unchanged if it is an absolute http(s) URL.
    Raises URLRequiredError when missing/empty, InvalidURLError otherwise.
    """
    if not url:
        raise URLRequiredError()
    try:
        _http_url.validate_python(url)
    except ValidationError as exc:
        raise InvalidURLError(f"invalid url {url!r}: {exc.error_count()} error(s)") from exc
    return url


def base_domain(url: str) -> str:
    """
    Returns scheme://host[:port] of `url`, or "" when either part is missing
    or the URL cannot be parsed. Userinfo is dropped.
    """
    try:
        parsed = urlsplit(url)
    except ValueError:
        return ""
    host = parsed.netloc.rpartition("@")[2]
    if not parsed.scheme or not host:
        return ""
    return f"{parsed.scheme}://{host}"


def resolve_against_domain(domain: str, href: str) -> str:
    """Make `href` absolute by prefixing the page's domain."""
    if not domain:
        return href
    return urljoin(domain + "/", href)

"""Request URL construction."""

import re
from collections.abc import Mapping
from urllib.parse import SplitResult, urlencode, urlsplit

from .errors import MalformedURLError

VALID_SCHEMES = ("http", "https")

_SLASH_RUN = re.compile(r"/{2,}")


def _split_absolute(url: str) -> SplitResult:
    """Split ``url``, rejecting anything that is not an absolute http(s) URL."""
    try:
        parts = urlsplit(url)
        # Accessing the port validates it.
        parts.port
    except ValueError as e:
        raise MalformedURLError(f"Invalid URL '{url}': {e}") from e

    if parts.scheme.lower() not in VALID_SCHEMES or not parts.hostname:
        raise MalformedURLError(f"Expected an absolute http(s) URL, got '{url}'")
    return parts


def validate_base_url(base: str) -> str:
    """Check that ``base`` is an absolute http(s) URL and return it without a trailing slash.

    Raises:
        MalformedURLError: If the URL has no scheme, an unsupported scheme, or no host.
    """
    _split_absolute(base)
    return base.rstrip("/")


def join_path(base: str, endpoint: str) -> str:
    """Join an endpoint onto a base URL with exactly one slash between them."""
    endpoint = _SLASH_RUN.sub("/", endpoint).strip("/")
    base = base.rstrip("/")
    if not endpoint:
        return base
    return f"{base}/{endpoint}"


def build_url(base: str, endpoint: str, params: Mapping[str, str] | None = None) -> str:
    """Compose a fully qualified request URL.

    Query pairs follow the iteration order of ``params`` and are
    form-encoded; callers must not rely on their order.

    Args:
        base: API root, e.g. ``https://www.ebi.ac.uk/gwas/summary-statistics/api``
        endpoint: Path below the root, with or without a leading slash
        params: Query parameters

    Returns:
        The request URL as a string

    Raises:
        MalformedURLError: If the base or the composed URL is not a valid absolute URL
    """
    url = join_path(validate_base_url(base), endpoint)
    if params:
        url = f"{url}?{urlencode(list(params.items()))}"

    _split_absolute(url)
    return url

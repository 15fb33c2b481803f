"""
Request Builders.

Builds the URL and the `RequestInit` of a fetch from a resource and its
effective configuration.
"""

import datetime
import inspect
import json
from typing import Any, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

from ..enum import HttpMethod
from ..errors import FetchError
from ..helpers import join_paths, to_iso_string
from ..models.config import ClientConfig
from .transport import RequestInit


def encode_query_value(value: Any) -> Optional[str]:
    """
    Stringifies one query parameter value.

    Returns None for `None` (the parameter is skipped). Dates are written in
    ISO-8601, booleans as `true`/`false`, and entities as their primary key.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        return to_iso_string(value)
    if isinstance(value, datetime.date):
        return value.isoformat()
    if hasattr(value, "is_collection") and not value.is_collection:
        return encode_query_value(value._primary_key_value())
    return str(value)


def _query_pairs(search_params: Mapping[str, Any]) -> Iterator[Tuple[str, str]]:
    for key, value in search_params.items():
        values = value if isinstance(value, (list, tuple)) else [value]
        for item in values:
            encoded = encode_query_value(item)
            if encoded is not None:
                yield key, encoded


def build_request_url(
    base_url: str,
    endpoint: Optional[str],
    path: Optional[str] = None,
    search_params: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Joins `base_url`, `endpoint` and `path`, then appends the query string.

    Example:
        build_request_url("https://api.io", "books", "", {"limit": 20, "offset": 0})
        -> "https://api.io/books?limit=20&offset=0"
    """
    url = join_paths(base_url, endpoint, path)
    if search_params:
        pairs: List[Tuple[str, str]] = list(_query_pairs(search_params))
        if pairs:
            url = f"{url}?{urlencode(pairs, quote_via=quote)}"
    return url


async def build_request_init(
    resource: Any, method: HttpMethod, config: ClientConfig
) -> RequestInit:
    """
    Builds headers and body of a request.

    The token provider may be sync or async. Mutating methods carry the
    entity serialized with `remove_invalid=True` as JSON text.

    Raises:
        FetchError: If the token provider returns an empty token.
    """
    headers = {"Content-Type": "application/json"}

    # Set Authorization header for private api
    if config.authentication is not None:
        token = config.authentication()
        if inspect.isawaitable(token):
            token = await token
        if not token:
            raise FetchError(f"fetch: `authentication` returned an invalid token ({token!r})")
        headers["Authorization"] = f"Bearer {token}"

    body = None
    if method.has_body:
        # Extract validated data only
        body = json.dumps(resource.serialize(remove_invalid=True))

    return RequestInit(method=method, headers=headers, body=body, timeout=config.timeout)

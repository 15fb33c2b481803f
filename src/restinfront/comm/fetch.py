"""
Fetch Orchestrator.

Runs one request for an entity or a collection and drives its fetch state:

1.  **Checks**: `base_url` and the model endpoint are required; a missing one
    raises `ConfigurationError` before any network activity.
2.  **Start**: the options are remembered and the track of the method
    (`get` for reads, `save` otherwise) is moved to in-progress, bumping its
    generation number.
3.  **Request**: the transport call and the body read share one timeout.
    A non-success status, a transport failure, a missing token or the
    timeout produce a `FetchError`.
4.  **Outcome**: on failure the error is logged, the track is marked failed
    and the `on_fetch_error` hook is called. On success the body (a
    paginated envelope or a bare payload) is built into a fresh instance with
    `is_new=False`, merged in place into the live one, and the track is
    marked succeeded.

A request superseded by a newer fetch on the same track is dropped when it
completes: no merge, no state change. Reads and saves never supersede each
other.
"""

import asyncio
import logging as log
from typing import Any, Mapping, Optional, Tuple

from ..errors import ConfigurationError, FetchError, FetchTimeoutError, WrongCardinality
from ..helpers import call_hook
from ..models.config import ClientConfig
from ..models.fetch_state import FetchOptions, FetchState, TrackState
from ..models.patch import apply_patch
from .request import build_request_init, build_request_url
from .transport import HttpxTransport, RequestInit, Transport, TransportResponse


def _unwrap_envelope(body: Any, config: ClientConfig) -> Tuple[Any, Optional[int]]:
    """Returns `(records, count)` of a paginated envelope, `(body, None)` otherwise."""
    if (
        isinstance(body, Mapping)
        and config.collection_data_key in body
        and config.collection_count_key in body
    ):
        return body[config.collection_data_key], body[config.collection_count_key]
    return body, None


def _build_fresh(resource: Any, body: Any, config: ClientConfig, response: Any) -> Any:
    """Builds the server payload into a new instance of the same cardinality."""
    model = resource._model_type()
    data, count = _unwrap_envelope(body, config)

    if resource.is_collection:
        if not isinstance(data, (list, tuple)):
            raise FetchError(
                f"fetch: expected a list of {model.__name__} items, "
                f"got {type(data).__name__}",
                response,
            )
        return model(list(data), is_new=False, count=count)

    if not isinstance(data, Mapping):
        raise FetchError(
            f"fetch: expected a single {model.__name__} item, got {type(data).__name__}",
            response,
        )
    return model(data, is_new=False)


async def _send(
    transport: Transport, url: str, init: RequestInit, timeout: float
) -> Tuple[TransportResponse, Any]:
    response = None
    try:
        async with asyncio.timeout(timeout):
            response = await transport(url, init)
            # Server side errors raise an exception
            if not response.ok:
                raise FetchError(
                    f"fetch: the server responded with an error status code ({response.status})",
                    response,
                )
            body = await response.json()
    except FetchError:
        raise
    except TimeoutError as e:
        raise FetchTimeoutError(
            f"fetch: no response from {url} within {timeout} seconds", response
        ) from e
    except Exception as e:
        raise FetchError(f"fetch: the request to {url} failed: {e}", response) from e
    return response, body


def _is_stale(track: TrackState, generation: int, url: str) -> bool:
    if track.generation != generation:
        log.debug(
            f"Dropping response of {url}: generation {generation} "
            f"superseded by {track.generation}"
        )
        return True
    return False


async def perform_fetch(resource: Any, options: FetchOptions) -> None:
    """
    Issues the request described by `options` for `resource`.

    Failures are not raised: they are recorded on the instance state and
    routed to the `on_fetch_error` hook as `hook(error=..., response=...)`.

    Raises:
        ConfigurationError: If `base_url` or the model endpoint is missing.
        WrongCardinality: If a mutating method is used on a collection.
    """
    model = resource._model_type()
    config = model.client_config()
    endpoint = model.endpoint()

    if not config.base_url:
        raise ConfigurationError(
            f"fetch: a `base_url` is required on model `{model.__name__}` to perform a request"
        )
    if not endpoint:
        raise ConfigurationError(
            f"fetch: an `endpoint` is required on model `{model.__name__}` to perform a request"
        )

    state: FetchState = resource._fetch
    track = state.track(options.method)
    if track is None:
        raise WrongCardinality(
            f"fetch: {options.method} is only available on a single item, "
            f"not on a collection of {model.__name__}"
        )

    state.options = options
    state.response = None
    generation = track.start()

    url = build_request_url(config.base_url, endpoint, options.path, options.search_params)
    transport = config.transport or HttpxTransport()
    log.debug(f"Sending {options.method} {url} (generation {generation})")

    try:
        try:
            init = await build_request_init(resource, options.method, config)
        except FetchError:
            raise
        except Exception as e:
            raise FetchError(f"fetch: cannot build the request to {url}: {e}") from e

        response, body = await _send(transport, url, init, config.timeout)

        fresh = None
        # No content: success without merge
        if body is not None:
            try:
                fresh = _build_fresh(resource, body, config, response)
            except FetchError:
                raise
            except Exception as e:
                raise FetchError(
                    f"fetch: cannot build {model.__name__} from the response of {url}: {e}",
                    response,
                ) from e

    except FetchError as error:
        if _is_stale(track, generation, url):
            return
        state.response = error.response
        track.fail()
        log.error(f"{options.method} {url} failed: {error}")
        call_hook(config.on_fetch_error, error=error, response=error.response)
        return

    if _is_stale(track, generation, url):
        return

    state.response = response
    if fresh is not None:
        apply_patch(resource, fresh, extend=options.extend)
    track.succeed()

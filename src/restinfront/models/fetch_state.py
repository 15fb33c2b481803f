"""
Fetch State Module.

Per-instance bookkeeping of the fetch lifecycle. Every entity and collection
owns a `FetchState` with a read track (`get`) and, for entities only, a save
track (`save`):

    idle -> in_progress -> {succeeded, failed}

The read track additionally latches `succeeded_once` the first time a read
succeeds. Each track counts its own `generation`, bumped when a request starts
on it, so a response belonging to a superseded request of the same track can
be recognized and dropped without touching the other track.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..enum import HttpMethod


@dataclass
class FetchOptions:
    """
    The options of one fetch, remembered for pagination continuation.

    Attributes:
        method (HttpMethod): The HTTP method.
        path (str): Path segment appended to `base_url` and the model endpoint.
        search_params (Optional[Dict[str, Any]]): Query parameters.
        extend (bool): Merge a collection response by appending instead of replacing.
    """

    method: HttpMethod = HttpMethod.GET
    path: str = ""
    search_params: Optional[Dict[str, Any]] = None
    extend: bool = False


@dataclass
class TrackState:
    in_progress: bool = False
    succeeded: bool = False
    failed: bool = False
    generation: int = 0

    def start(self) -> int:
        """Moves the track to in-progress and returns the new generation number."""
        self.generation += 1
        self.in_progress = True
        self.succeeded = False
        self.failed = False
        return self.generation

    def succeed(self) -> None:
        self.in_progress = False
        self.succeeded = True

    def fail(self) -> None:
        self.in_progress = False
        self.failed = True

    def reset(self) -> None:
        self.in_progress = False
        self.succeeded = False
        self.failed = False


@dataclass
class ReadTrackState(TrackState):
    succeeded_once: bool = False

    def succeed(self) -> None:
        super().succeed()
        self.succeeded_once = True


@dataclass
class FetchState:
    """
    Attributes:
        options (Optional[FetchOptions]): Options of the latest fetch.
        response (Optional[Any]): Transport response of the latest fetch, once received.
        get (ReadTrackState): The read track.
        save (Optional[TrackState]): The save track (None on collections).
    """

    options: Optional[FetchOptions] = None
    response: Optional[Any] = None
    get: ReadTrackState = field(default_factory=ReadTrackState)
    save: Optional[TrackState] = None

    def track(self, method: HttpMethod) -> Optional[TrackState]:
        """Returns the track driven by `method`: `get` for reads, `save` otherwise."""
        return self.get if method == HttpMethod.GET else self.save

import asyncio
import copy
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional, Tuple

from restinfront.comm import RequestInit


@dataclass
class FakeResponse:
    """In-memory response honoring the transport response contract."""

    status: int = 200
    body: Any = None
    delay: float = 0.0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    async def json(self) -> Any:
        return copy.deepcopy(self.body)


class FakeTransport:
    """
    Transport replaying queued responses in order.

    Every call is recorded in `requests` as `(url, init)`. When the queue is
    empty, an empty 200 response is returned.
    """

    def __init__(self):
        self.requests: List[Tuple[str, RequestInit]] = []
        self._responses: Deque[FakeResponse] = deque()

    def queue(self, status: int = 200, body: Any = None, delay: float = 0.0) -> FakeResponse:
        response = FakeResponse(status=status, body=body, delay=delay)
        self._responses.append(response)
        return response

    async def __call__(self, url: str, init: RequestInit) -> FakeResponse:
        self.requests.append((url, init))
        response = self._responses.popleft() if self._responses else FakeResponse()
        if response.delay:
            await asyncio.sleep(response.delay)
        return response

    @property
    def last_url(self) -> Optional[str]:
        return self.requests[-1][0] if self.requests else None

    @property
    def last_init(self) -> Optional[RequestInit]:
        return self.requests[-1][1] if self.requests else None


class HookRecorder:
    """Callable recording the keyword / positional arguments of each call."""

    def __init__(self):
        self.calls: List[Tuple[tuple, dict]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self.calls.append((args, kwargs))

    @property
    def count(self) -> int:
        return len(self.calls)

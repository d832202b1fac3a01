"""
Fixed-interval polling of dashboard queries
"""

import asyncio
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set

import httpx
import structlog

from config.settings import settings

logger = structlog.get_logger()

Fetcher = Callable[[str, Dict[str, Any]], Awaitable[Any]]
UpdateListener = Callable[["PollingClient"], None]


class PollState(str, Enum):
    """Whether the first poll cycle has completed"""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


def _identity(payload: Any) -> Any:
    return payload


class PollingClient:
    """
    Re-issues a query on a fixed cadence and holds the latest result.

    Every poll gets a sequence number when it is issued; a response is only
    applied if it is newer than the last applied one, so a slow response from
    an earlier cycle never replaces a later result. Changing the query
    parameters bumps a generation counter that invalidates anything still in
    flight for the old parameters.
    """

    def __init__(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        interval: Optional[float] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        fetch: Optional[Fetcher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        name: Optional[str] = None,
    ):
        self.url = url
        self.interval = settings.REFRESH_INTERVAL if interval is None else interval
        self.name = name or url
        self._params: Dict[str, Any] = dict(params or {})
        self._parse = parse or _identity
        self._fetch = fetch
        self._http_client = http_client
        self._owns_client = False

        self._state = PollState.UNINITIALIZED
        self._data: Any = None
        self.last_error: Optional[Exception] = None

        self._issued_seq = 0
        self._applied_seq = 0
        self._generation = 0
        self._schedule_task: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._listeners: List[UpdateListener] = []
        self._closed = False

    @property
    def data(self) -> Any:
        """Latest applied snapshot, None until the first successful poll"""
        return self._data

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state == PollState.UNINITIALIZED

    @property
    def params(self) -> Mapping[str, Any]:
        return MappingProxyType(self._params)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def running(self) -> bool:
        return self._schedule_task is not None and not self._schedule_task.done()

    def add_listener(self, listener: UpdateListener) -> None:
        """Register a callback run after each applied snapshot"""
        self._listeners.append(listener)

    def start(self) -> None:
        """Poll immediately and then every ``interval`` seconds"""
        if self._closed:
            raise RuntimeError("Polling client is closed")
        if self.running:
            return

        if self._fetch is None and self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.POLL_TIMEOUT))
            self._owns_client = True

        self._schedule_task = asyncio.create_task(self._run_schedule())
        logger.info("Polling started", poller=self.name, interval=self.interval)

    async def _run_schedule(self) -> None:
        while True:
            self.refresh()
            await asyncio.sleep(self.interval)

    def refresh(self) -> asyncio.Task:
        """Issue one poll cycle now without waiting for earlier ones to finish"""
        if self._closed:
            raise RuntimeError("Polling client is closed")

        self._issued_seq += 1
        task = asyncio.create_task(
            self._poll(self._issued_seq, self._generation, dict(self._params))
        )
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _poll(self, seq: int, generation: int, params: Dict[str, Any]) -> bool:
        try:
            payload = await self._request(params)
            snapshot = self._parse(payload)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # A failure older than the applied snapshot says nothing about it
            if generation == self._generation and not self._closed and seq > self._applied_seq:
                self.last_error = e
                logger.warning(
                    "Poll failed, keeping previous snapshot",
                    poller=self.name,
                    seq=seq,
                    error=str(e),
                )
            return False

        return self._apply(seq, generation, snapshot)

    async def _request(self, params: Dict[str, Any]) -> Any:
        if self._fetch is not None:
            return await self._fetch(self.url, params)

        if self._http_client is None:
            raise RuntimeError("Polling client has no HTTP client")
        response = await self._http_client.get(self.url, params=params)
        response.raise_for_status()
        return response.json()

    def _apply(self, seq: int, generation: int, snapshot: Any) -> bool:
        if self._closed or generation != self._generation:
            logger.debug("Discarding response for stale parameters", poller=self.name, seq=seq)
            return False
        if seq <= self._applied_seq:
            logger.debug(
                "Discarding out-of-order response",
                poller=self.name,
                seq=seq,
                applied_seq=self._applied_seq,
            )
            return False

        self._applied_seq = seq
        self._data = snapshot
        self._state = PollState.READY
        self.last_error = None

        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception as e:
                logger.error("Poll listener failed", poller=self.name, error=str(e))

        return True

    def set_params(self, params: Mapping[str, Any]) -> None:
        """
        Re-key the query.

        Pending polls for the old parameters are cancelled and their late
        responses ignored; the client returns to its loading state and, if
        running, polls again immediately.
        """
        new_params = dict(params)
        if new_params == self._params:
            return

        self._generation += 1
        self._cancel_in_flight()
        self._params = new_params
        self._data = None
        self._state = PollState.UNINITIALIZED
        self.last_error = None
        logger.info("Polling parameters changed", poller=self.name, params=new_params)

        if self.running:
            self._schedule_task.cancel()
            self._schedule_task = asyncio.create_task(self._run_schedule())

    def _cancel_in_flight(self) -> List[asyncio.Task]:
        tasks = list(self._in_flight)
        for task in tasks:
            task.cancel()
        return tasks

    async def close(self) -> None:
        """Stop the schedule and cancel every pending poll"""
        if self._closed:
            return
        self._closed = True

        tasks = self._cancel_in_flight()
        if self._schedule_task is not None:
            self._schedule_task.cancel()
            tasks.append(self._schedule_task)
            self._schedule_task = None

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

        logger.info("Polling stopped", poller=self.name)

    async def __aenter__(self):
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

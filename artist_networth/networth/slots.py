from __future__ import annotations
from concurrent.futures import Future, TimeoutError as FutureTimeout
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
import asyncio
import logging
import threading

from artist_networth.ingestion.wikidata_client import WikidataClient
from artist_networth.networth.cancel import CancelToken
from artist_networth.networth.errors import ResolutionCancelled
from artist_networth.networth.pipeline import FAILED, IDLE, LOADING, NetWorthResolver, ResolutionState

logger = logging.getLogger(__name__)


def parse_artist_list(text: Optional[str]) -> List[str]:
    """Split comma-separated artist input; trims, drops blanks and repeats."""
    seen = set()
    out: List[str] = []
    for part in (text or "").split(","):
        name = part.strip()
        if name and name not in seen:
            seen.add(name)
            out.append(name)
    return out


class NetworthSlot:
    """One display slot: the latest name wins.

    set_name() cancels whatever the slot was resolving and starts over;
    results from a superseded token are dropped on commit.
    """

    def __init__(self, slot_id: str, board: "SlotBoard"):
        self.id = slot_id
        self._board = board
        self._lock = threading.Lock()
        self._name = ""
        self._token: Optional[CancelToken] = None
        self._state = ResolutionState(status=IDLE)
        self.pending: Optional[Future] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> ResolutionState:
        with self._lock:
            return self._state

    def set_name(self, name: Optional[str]) -> ResolutionState:
        query = (name or "").strip()
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._name = query
            if not query:
                self._token = None
                self.pending = None
                self._state = ResolutionState(status=IDLE)
                return self._state
            token = CancelToken(f"{self.id}:{query}")
            self._token = token
            self._state = ResolutionState(status=LOADING)
            self.pending = self._board.submit(self._run(query, token))
            return self._state

    def detach(self) -> None:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._token = None
            self.pending = None
            self._name = ""
            self._state = ResolutionState(status=IDLE)

    async def _run(self, query: str, token: CancelToken) -> None:
        try:
            state = await self._board.resolver.resolve(query, token)
        except ResolutionCancelled:
            logger.debug(f"slot {self.id}: dropped superseded lookup for {query!r}")
            return
        except Exception as e:
            logger.exception(f"slot {self.id}: lookup for {query!r} failed")
            state = ResolutionState(status=FAILED, error=str(e) or "Failed to fetch net worth.")
        self._commit(token, state)

    def _commit(self, token: CancelToken, state: ResolutionState) -> bool:
        with self._lock:
            if token is not self._token or token.cancelled:
                return False
            self._state = state
            return True


class SlotBoard:
    """Registry of slots plus the event loop their lookups run on.

    Without an explicit loop the board starts a daemon thread running its own
    loop on first use, so synchronous callers (Flask, CLI) can submit work.
    """

    def __init__(
        self,
        resolver_factory: Optional[Callable[[], NetWorthResolver]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self._resolver_factory = resolver_factory or (lambda: NetWorthResolver(WikidataClient()))
        self._resolver: Optional[NetWorthResolver] = None
        self._loop = loop
        self._thread: Optional[threading.Thread] = None
        self._slots: Dict[str, NetworthSlot] = {}
        self._lock = threading.Lock()

    @property
    def resolver(self) -> NetWorthResolver:
        with self._lock:
            if self._resolver is None:
                self._resolver = self._resolver_factory()
            return self._resolver

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                self._loop = asyncio.new_event_loop()
                self._thread = threading.Thread(
                    target=self._loop.run_forever, name="networth-loop", daemon=True
                )
                self._thread.start()
            return self._loop

    def submit(self, coro: Awaitable[Any]) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def run(self, coro: Awaitable[Any], timeout: Optional[float] = None) -> Any:
        """Block until `coro` finishes on the board's loop (not from that loop)."""
        return self.submit(coro).result(timeout)

    def slot(self, slot_id: str, create: bool = True) -> Optional[NetworthSlot]:
        with self._lock:
            s = self._slots.get(slot_id)
            if s is None and create:
                s = NetworthSlot(slot_id, self)
                self._slots[slot_id] = s
            return s

    def remove(self, slot_id: str) -> bool:
        with self._lock:
            s = self._slots.pop(slot_id, None)
        if s is None:
            return False
        s.detach()
        return True

    def slot_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._slots)

    async def lookup_many(
        self, names: List[str], tokens: Optional[List[CancelToken]] = None
    ) -> List[Tuple[str, ResolutionState]]:
        """Resolve independent names concurrently; each gets its own token.

        Pass `tokens` (one per name) to keep the ability to cancel them.
        """
        if tokens is None:
            tokens = [CancelToken(n) for n in names]
        resolver = self.resolver
        states = await asyncio.gather(*(resolver.resolve(n, t) for n, t in zip(names, tokens)))
        return list(zip(names, states))

    def lookup_many_sync(self, names: List[str], timeout: Optional[float] = None) -> List[Tuple[str, ResolutionState]]:
        """Blocking lookup_many; on timeout cancels every lookup and raises TimeoutError."""
        tokens = [CancelToken(n) for n in names]
        fut = self.submit(self.lookup_many(names, tokens))
        try:
            return fut.result(timeout)
        except FutureTimeout:
            for t in tokens:
                t.cancel()
            fut.cancel()
            logger.warning(f"lookup of {len(names)} name(s) timed out after {timeout}s")
            raise TimeoutError(f"lookup timed out after {timeout}s") from None

    def close(self) -> None:
        with self._lock:
            slots = list(self._slots.values())
            self._slots.clear()
        for s in slots:
            s.detach()
        if self._thread is None:
            if self._resolver is not None and self._loop is not None and not self._loop.is_closed():
                # external loop: cannot block on it, schedule the close instead
                asyncio.run_coroutine_threadsafe(self._resolver.client.aclose(), self._loop)
            return
        loop = self._loop
        if self._resolver is not None:
            asyncio.run_coroutine_threadsafe(self._resolver.client.aclose(), loop).result(5)
        loop.call_soon_threadsafe(loop.stop)
        self._thread.join(5)
        loop.close()
        with self._lock:
            self._thread = None
            self._loop = None

    async def aclose(self) -> None:
        """Close from inside the board's own (external) loop."""
        with self._lock:
            slots = list(self._slots.values())
            self._slots.clear()
        for s in slots:
            s.detach()
        if self._resolver is not None:
            await self._resolver.client.aclose()

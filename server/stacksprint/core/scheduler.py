# stacksprint/core/scheduler.py
"""
Request Scheduler
- Observes the payload derived by the ConfigStore (value equality, not identity).
- Preview mode: trailing-edge debounce. Every change restarts the quiet-period
  timer; when it fires, exactly one call is issued with the payload current
  at fire time, under a fresh cancellation token. Firing cancels the token of
  the previous preview call.
- Manual mode: issued immediately, independent of any pending timer, never
  cancelled by preview calls.
- Every call takes a number from a monotonic sequence. A response is applied
  only if its token is still live and no higher-numbered response has been
  applied already, so out-of-order completions never show stale data.

The blocking HTTP call runs in the default executor; a superseded call keeps
running there but its outcome is dropped.
"""
import asyncio
import logging
from typing import Optional, Set

from stacksprint.core.config_store import ConfigStore
from stacksprint.core.generation_client import GenerationClient, GenerationError
from stacksprint.core.preview import GenerationView
from stacksprint.models import GenerationRequest, GenerationResult
from stacksprint.utils.config import PREVIEW_DEBOUNCE_MS

logger = logging.getLogger(__name__)

PREVIEW = "preview"
MANUAL = "manual"


class CancellationToken:
    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class RequestScheduler:
    def __init__(self,
                 store: ConfigStore,
                 client: GenerationClient,
                 view: GenerationView,
                 quiet_period_ms: int = PREVIEW_DEBOUNCE_MS,
                 preview_on_start: bool = True):
        self.store = store
        self.client = client
        self.view = view
        self.quiet_period = quiet_period_ms / 1000.0
        self.preview_on_start = preview_on_start

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._preview_token: Optional[CancellationToken] = None
        self._last_payload: Optional[GenerationRequest] = None
        self._issued_seq = 0
        self._applied_seq = 0
        self._tasks: Set[asyncio.Task] = set()
        self._unsubscribe = None
        self._closed = False

    # ----------------------------
    # Lifecycle
    # ----------------------------
    def start(self) -> None:
        """Attach to the running event loop and begin observing the store."""
        self._loop = asyncio.get_running_loop()
        self._closed = False
        self._last_payload = self.store.derive_payload()
        self._unsubscribe = self.store.subscribe(self._on_payload)
        if self.preview_on_start:
            self._restart_timer()

    def close(self) -> None:
        """Stop observing; drop the pending timer and any in-flight results."""
        self._closed = True
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._preview_token is not None:
            self._preview_token.cancel()

    async def wait_idle(self) -> None:
        """Wait for every call issued so far to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def preview_pending(self) -> bool:
        return self._timer is not None

    # ----------------------------
    # Preview mode
    # ----------------------------
    def _on_payload(self, payload: GenerationRequest) -> None:
        if self._closed or payload == self._last_payload:
            return
        self._last_payload = payload
        loop = self._loop
        if loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._restart_timer()
        else:
            loop.call_soon_threadsafe(self._restart_timer)

    def _restart_timer(self) -> None:
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.quiet_period, self._fire_preview)

    def _fire_preview(self) -> None:
        self._timer = None
        if self._closed:
            return
        if self._preview_token is not None:
            self._preview_token.cancel()
        token = CancellationToken()
        self._preview_token = token
        self._spawn(self._run(PREVIEW, token))

    def _spawn(self, coro) -> asyncio.Task:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ----------------------------
    # Manual mode
    # ----------------------------
    async def trigger_manual(self) -> bool:
        """Issue an immediate call; True when its result was the one applied."""
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        task = self._spawn(self._run(MANUAL, CancellationToken()))
        return await task

    # ----------------------------
    # Call + apply
    # ----------------------------
    def _is_stale(self, seq: int, token: CancellationToken) -> bool:
        return self._closed or token.cancelled or seq < self._applied_seq

    async def _run(self, mode: str, token: CancellationToken) -> bool:
        payload = self.store.derive_payload()
        self._issued_seq += 1
        seq = self._issued_seq
        self.view.begin(mode)
        result: Optional[GenerationResult] = None
        error: Optional[str] = None
        try:
            result = await self._loop.run_in_executor(None, self.client.generate, payload)
        except GenerationError as e:
            error = e.message
        except Exception as e:
            logger.exception("Unexpected failure during %s generation", mode)
            error = str(e) or "Generation failed"
        finally:
            self.view.end(mode)

        if self._is_stale(seq, token):
            logger.debug("Dropping %s response #%d (superseded)", mode, seq)
            return False
        self._applied_seq = seq
        if error is not None:
            if mode == PREVIEW:
                logger.info("Preview generation failed: %s", error)
            self.view.apply_error(error, mode)
            return False
        self.view.apply_result(result, payload, mode)
        return True

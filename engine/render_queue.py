"""
Render Queue
------------
Single writer to a RenderSink. Sequences drain strictly FIFO; Typed lines
are paced one character at a time and hold the queue until fully written.
Never alters game state.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Iterable, List, Optional, Tuple

from engine.instructions import Instant, RenderInstruction, Typed
from ui.sink import RenderSink

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class RenderQueue:
    def __init__(
        self,
        sink: RenderSink,
        *,
        typing_scale: float = 1.0,
        sleep: Optional[SleepFn] = None,
    ):
        """
        sink: where lines are written
        typing_scale: multiplier on each Typed speed; 0 writes Typed text whole
        sleep: injectable async sleep (tests pass a recorder)
        """
        if typing_scale < 0:
            raise ValueError(f"typing_scale must be >= 0, got {typing_scale}")
        self.sink = sink
        self.typing_scale = typing_scale
        self._sleep: SleepFn = sleep or asyncio.sleep

        self._pending: Deque[Tuple[RenderInstruction, ...]] = deque()
        self._busy = False
        self._drain_task: Optional[asyncio.Task] = None
        self._waiters: List[asyncio.Future] = []
        self._idle_callbacks: List[Callable[[], None]] = []

    # =========================
    # PUBLIC API
    # =========================

    def submit(self, sequence: Iterable[RenderInstruction]) -> None:
        """
        Enqueue a whole sequence as one unit. Starts draining at once when
        idle; otherwise waits behind everything already queued.
        Must be called from inside a running event loop.
        """
        seq = tuple(sequence)
        if not seq:
            return
        for instr in seq:
            if not isinstance(instr, (Typed, Instant)):
                raise TypeError(f"Not a render instruction: {instr!r}")

        self._pending.append(seq)
        if not self._busy:
            self._busy = True
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    def is_busy(self) -> bool:
        return self._busy

    async def wait_idle(self) -> None:
        """Resolves once every submitted sequence has drained."""
        if not self._busy:
            return
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        await fut

    def on_idle(self, callback: Callable[[], None]) -> None:
        """Call `callback` on every busy -> idle transition."""
        self._idle_callbacks.append(callback)

    # =========================
    # DRAIN
    # =========================

    async def _drain(self) -> None:
        written = 0
        error: Optional[BaseException] = None
        try:
            while self._pending:
                seq = self._pending.popleft()
                for instr in seq:
                    await self._render(instr)
                    written += 1
        except Exception as exc:
            error = exc
            dropped = sum(len(s) for s in self._pending)
            self._pending.clear()
            logger.error("Render drain failed after %d line(s), dropped %d: %s", written, dropped, exc)
            raise
        finally:
            self._busy = False
            self._drain_task = None
            self._notify_idle(error)
            logger.debug("Render queue idle after %d line(s)", written)

    async def _render(self, instr: RenderInstruction) -> None:
        if isinstance(instr, Instant):
            self.sink.open_line(instr.style)
            if instr.text:
                self.sink.append_text(instr.text)
            self.sink.close_line()
            return

        delay = instr.speed / 1000.0 * self.typing_scale
        self.sink.open_line(instr.style, instr.speed)
        if delay <= 0:
            if instr.text:
                self.sink.append_text(instr.text)
        else:
            for ch in instr.text:
                self.sink.append_text(ch)
                await self._sleep(delay)
        self.sink.close_line()

    def _notify_idle(self, error: Optional[BaseException]) -> None:
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if fut.done():
                continue
            if error is not None:
                fut.set_exception(error)
            else:
                fut.set_result(None)
        if error is None:
            for cb in list(self._idle_callbacks):
                cb()

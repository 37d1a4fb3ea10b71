from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import List

from engine.instructions import Instant
from engine.narrative import NarrativeStateMachine
from engine.render_queue import RenderQueue

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "C:\\ADVENTURE>"


class GateResult(str, Enum):
    ACCEPTED = "accepted"
    INVALID = "invalid"
    REJECTED = "rejected"


class InputGate:
    """
    The only way player input reaches the state machine.

    Tokens are refused outright while the render queue is busy or a turn is
    still being revealed, so a new action can never interleave with the
    previous turn's output.
    """

    def __init__(self, machine: NarrativeStateMachine, queue: RenderQueue, prompt: str = DEFAULT_PROMPT):
        self.machine = machine
        self.queue = queue
        self.prompt = prompt
        self._turn_in_flight = False
        self._superseded = False
        self._turn_waiters: List[asyncio.Future] = []

    @property
    def accepting(self) -> bool:
        return not (self._turn_in_flight or self.queue.is_busy())

    async def submit(self, token: str) -> GateResult:
        if not self.accepting:
            logger.debug("Rejected %r: output still in progress", token)
            return GateResult.REJECTED

        raw = (token or "").strip()
        if not raw:
            return GateResult.REJECTED

        action = self.machine.registry.resolve(raw)
        if action is None:
            logger.debug("Invalid token %r (offered: %s)", raw, self.machine.registry.keys())
            self.queue.submit([Instant(f"ERROR: Invalid command '{raw}'", "error")])
            return GateResult.INVALID

        self._turn_in_flight = True
        try:
            self.queue.sink.hide_choices()
            turn = self.machine.advance(action)
            logger.info("Accepted %s -> %s", raw, action)
            self.queue.submit((Instant(f"{self.prompt} {raw}", "system"),) + turn.instructions)
            await self.reveal()
        finally:
            self._turn_in_flight = False
            self._superseded = False
            waiters, self._turn_waiters = self._turn_waiters, []
            for fut in waiters:
                if not fut.done():
                    fut.set_result(None)
        return GateResult.ACCEPTED

    async def reveal(self) -> None:
        """
        Wait for the current output to finish, then show the status line and
        the choices valid for the next turn.
        """
        await self.queue.wait_idle()
        if self._superseded:
            return
        state = self.machine.state
        self.queue.sink.show_status(state.status, state.inventory)
        if self.machine.registry:
            self.queue.sink.show_choices(self.machine.registry.as_payload())

    async def supersede(self) -> None:
        """
        Wait out a turn that is still being revealed, without letting it show
        its choices. Used before a restart replaces that turn.
        """
        if not self._turn_in_flight:
            return
        self._superseded = True
        fut = asyncio.get_running_loop().create_future()
        self._turn_waiters.append(fut)
        await fut

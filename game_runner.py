"""
game_runner.py
--------------
Wires one playable session: story graph, state machine, render queue,
input gate, and the sink they all write to.
Used by both the CLI (play.py) and the web server.
"""

import logging
from typing import Optional

from engine.input_gate import DEFAULT_PROMPT, GateResult, InputGate
from engine.narrative import NarrativeStateMachine
from engine.render_queue import RenderQueue, SleepFn
from story.story_graph import StoryGraph
from story.story_loader import load_story
from ui.sink import RenderSink

logger = logging.getLogger(__name__)


class Game:
    def __init__(
        self,
        sink: RenderSink,
        graph: Optional[StoryGraph] = None,
        *,
        typing_scale: float = 1.0,
        sleep: Optional[SleepFn] = None,
        prompt: str = DEFAULT_PROMPT,
    ):
        self.sink = sink
        self.graph = graph or load_story()
        self.queue = RenderQueue(sink, typing_scale=typing_scale, sleep=sleep)
        self.machine = NarrativeStateMachine(self.graph, is_busy=self.queue.is_busy)
        self.gate = InputGate(self.machine, self.queue, prompt=prompt)
        self.started = False

    @property
    def state(self):
        return self.machine.state

    @property
    def registry(self):
        return self.machine.registry

    @property
    def terminal(self) -> bool:
        return self.machine.state.terminal

    async def start(self) -> None:
        """Play the opening beat and reveal the first choices."""
        if self.started:
            raise RuntimeError("Game already started; use restart()")
        self.started = True
        turn = self.machine.begin()
        self.queue.submit(turn.instructions)
        await self.gate.reveal()

    async def submit(self, token: str) -> GateResult:
        if not self.started:
            raise RuntimeError("Call start() before submitting input")
        return await self.gate.submit(token)

    async def restart(self) -> None:
        """
        Full reset: equivalent to discarding this engine and building a new one.
        Waits for any in-progress output first; a turn still being revealed
        finishes without showing its choices.
        """
        await self.gate.supersede()
        await self.queue.wait_idle()
        self.sink.hide_choices()
        self.started = True
        turn = self.machine.restart()
        self.queue.submit(turn.instructions)
        await self.gate.reveal()

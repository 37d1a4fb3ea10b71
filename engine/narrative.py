"""
Narrative State Machine
-----------------------
Owns the GameState for one session.
Maps (state, action) to the next state, the turn's render instructions,
and the choices valid for the following turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from engine.choices import ChoiceRegistry
from engine.errors import GraphInconsistencyError
from engine.instructions import RenderInstruction, Typed, blank, separator
from engine.state import GameState, initial_state
from story.story_graph import OPENING_ACTION, StoryGraph

logger = logging.getLogger(__name__)

RESTART_HINT = "Press R to restart..."


@dataclass(frozen=True)
class Turn:
    state: GameState
    instructions: Tuple[RenderInstruction, ...]
    registry: ChoiceRegistry

    @property
    def terminal(self) -> bool:
        return self.state.terminal


class NarrativeStateMachine:
    def __init__(self, graph: StoryGraph, is_busy: Optional[Callable[[], bool]] = None):
        """
        graph: validated StoryGraph
        is_busy: optional probe into the render queue; advancing while it
                 reports True is a protocol violation.
        """
        self.graph = graph
        self._is_busy = is_busy or (lambda: False)
        self.state: GameState = initial_state()
        self.registry: ChoiceRegistry = ChoiceRegistry.empty()

    # =========================
    # PURE TRANSITIONS
    # =========================

    def apply(self, state: GameState, action: str) -> Turn:
        """
        Deterministic: identical (state, action) always yields an equal Turn.
        Does not touch self.state.
        """
        if state.terminal:
            raise GraphInconsistencyError(
                f"'{action}' applied at terminal location {state.location.value}"
            )

        outcome = self.graph.lookup(state.location, action)
        if outcome is None:
            raise GraphInconsistencyError(
                f"No outcome for action '{action}' at {state.location.value}"
            )

        resolution = outcome.resolve(state)
        instructions = list(resolution.instructions)
        if action != OPENING_ACTION:
            instructions.insert(0, separator())
        if resolution.terminal:
            instructions.append(blank())
            instructions.append(Typed(RESTART_HINT, "prompt"))
            registry = ChoiceRegistry.empty()
        else:
            registry = ChoiceRegistry(resolution.choices)

        return Turn(resolution.state, tuple(instructions), registry)

    def opening(self, state: Optional[GameState] = None) -> Turn:
        return self.apply(state or initial_state(), OPENING_ACTION)

    # =========================
    # OWNED STATE
    # =========================

    def begin(self) -> Turn:
        """Reset to the initial state and play the opening beat."""
        self._check_idle("begin")
        turn = self.opening()
        self._commit(turn)
        return turn

    def advance(self, action: str) -> Turn:
        self._check_idle(action)
        if not self.registry.offers(action):
            raise GraphInconsistencyError(
                f"Action '{action}' is not on offer (offered: {self.registry.actions()})"
            )
        turn = self.apply(self.state, action)
        self._commit(turn)
        return turn

    def restart(self) -> Turn:
        logger.info("Restarting from %s", self.state.location.value)
        self.state = initial_state()
        self.registry = ChoiceRegistry.empty()
        return self.begin()

    # =========================
    # HELPERS
    # =========================

    def _check_idle(self, action: str) -> None:
        if self._is_busy():
            raise GraphInconsistencyError(
                f"Cannot apply '{action}' while the render queue is still draining"
            )

    def _commit(self, turn: Turn) -> None:
        logger.debug(
            "Turn: %s -> %s flags=%s inventory=%s choices=%s",
            self.state.location.value,
            turn.state.location.value,
            turn.state.flags,
            [i.value for i in turn.state.inventory],
            turn.registry.actions(),
        )
        self.state = turn.state
        self.registry = turn.registry

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from engine.choices import Choice
from engine.errors import GraphInconsistencyError
from engine.instructions import STYLES, RenderInstruction
from engine.state import Flags, GameState, Item, Location

logger = logging.getLogger(__name__)

OPENING_ACTION = "begin"

ConditionEvaluator = Callable[[Dict[str, Any], Dict[str, Any]], bool]
EffectExecutor = Callable[[Dict[str, Any], Dict[str, Any]], None]


@dataclass(frozen=True)
class Branch:
    conditions: Tuple[Dict[str, Any], ...]
    effects: Tuple[Dict[str, Any], ...]
    choices: Tuple[Choice, ...]

    @property
    def unconditional(self) -> bool:
        return all(c.get("type") == "always" for c in self.conditions)

    def destination(self, origin: Location) -> Location:
        """Where this branch leaves the player: the last `move`, else where they started."""
        dest = origin
        for eff in self.effects:
            if eff.get("type") == "move" and eff.get("to"):
                dest = Location(eff["to"])
        return dest


@dataclass(frozen=True)
class Resolution:
    state: GameState
    instructions: Tuple[RenderInstruction, ...]
    choices: Tuple[Choice, ...]

    @property
    def terminal(self) -> bool:
        return self.state.terminal


@dataclass(frozen=True)
class Outcome:
    """
    Every way a single (location, action) can play out.
    Branches are tried in order; the first whose conditions all pass wins.
    """
    location: Location
    action: str
    branches: Tuple[Branch, ...]
    _evaluate: ConditionEvaluator = field(repr=False, compare=False)
    _execute: EffectExecutor = field(repr=False, compare=False)

    def select(self, state: GameState) -> Branch:
        ctx = {"state": state}
        for idx, branch in enumerate(self.branches):
            if all(self._evaluate(cond, ctx) for cond in branch.conditions):
                logger.debug("%s/%s -> branch %d", self.location.value, self.action, idx)
                return branch
        raise GraphInconsistencyError(
            f"No branch of {self.location.value}/{self.action} matches state {state!r}"
        )

    def resolve(self, state: GameState) -> Resolution:
        branch = self.select(state)
        ctx: Dict[str, Any] = {"state": state, "instructions": []}
        for eff in branch.effects:
            self._execute(eff, ctx)
        return Resolution(ctx["state"], tuple(ctx["instructions"]), branch.choices)

    def state_delta(self, state: GameState) -> GameState:
        return self.resolve(state).state


class StoryGraph:
    """
    Static, declarative description of every narrative beat.
    No game logic here beyond branch selection; the engine owns the state.
    """

    def __init__(
        self,
        story_id: str,
        beats: Dict[Location, Dict[str, Tuple[Branch, ...]]],
        condition_evaluator: ConditionEvaluator,
        effect_executor: EffectExecutor,
        title: Optional[str] = None,
    ):
        self.story_id = story_id
        self.title = title
        self._beats = beats
        self._evaluate = condition_evaluator
        self._execute = effect_executor

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def lookup(self, location: Location, action: str) -> Optional[Outcome]:
        branches = self._beats.get(location, {}).get(action)
        if branches is None:
            return None
        return Outcome(location, action, branches, self._evaluate, self._execute)

    def opening(self) -> Outcome:
        outcome = self.lookup(Location.START, OPENING_ACTION)
        if outcome is None:
            raise GraphInconsistencyError("Story has no opening beat")
        return outcome

    def actions_at(self, location: Location) -> List[str]:
        return list(self._beats.get(location, {}))

    def beats(self) -> Iterator[Tuple[Location, str, Tuple[Branch, ...]]]:
        for location, actions in self._beats.items():
            for action, branches in actions.items():
                yield location, action, branches

    # ──────────────────────────────────────────────
    # Validation
    # ──────────────────────────────────────────────

    def validate(self, known_condition: Callable[[str], bool], known_effect: Callable[[str], bool]) -> List[str]:
        """
        Returns "path: message" problems. Empty means the graph is total:
        every choice any branch can offer resolves to a defined outcome, and
        every outcome has an unconditional fallback branch.
        """
        problems: List[str] = []

        if self.lookup(Location.START, OPENING_ACTION) is None:
            problems.append(f"start/{OPENING_ACTION}: missing opening beat")

        for location, action, branches in self.beats():
            path = f"{location.value}/{action}"
            if location.terminal:
                problems.append(f"{path}: terminal location cannot have outgoing actions")
            if not branches:
                problems.append(f"{path}: no branches")
                continue
            if not branches[-1].unconditional:
                problems.append(f"{path}: last branch must be unconditional")

            for idx, branch in enumerate(branches):
                bpath = f"{path}[{idx}]"
                problems.extend(_check_conditions(bpath, branch, known_condition))
                problems.extend(_check_effects(bpath, branch, known_effect))

                try:
                    dest = branch.destination(location)
                except ValueError as exc:
                    problems.append(f"{bpath}: {exc}")
                    continue

                if dest.terminal and branch.choices:
                    problems.append(f"{bpath}: ends at {dest.value} but still offers choices")
                if not dest.terminal and not branch.choices:
                    problems.append(f"{bpath}: offers no choices at non-terminal {dest.value}")

                seen = set()
                for choice in branch.choices:
                    if choice.action in seen:
                        problems.append(f"{bpath}: choice '{choice.action}' offered twice")
                    seen.add(choice.action)
                    if choice.action == OPENING_ACTION:
                        problems.append(f"{bpath}: '{OPENING_ACTION}' cannot be offered as a choice")
                    elif self.lookup(dest, choice.action) is None:
                        problems.append(
                            f"{bpath}: choice '{choice.action}' has no outcome at {dest.value}"
                        )

        return problems

    def unreachable(self) -> List[str]:
        """Beats no sequence of offered choices can reach from the opening."""
        reached = set()
        stack = [(Location.START, OPENING_ACTION)]
        while stack:
            key = stack.pop()
            if key in reached:
                continue
            reached.add(key)
            branches = self._beats.get(key[0], {}).get(key[1], ())
            for branch in branches:
                try:
                    dest = branch.destination(key[0])
                except ValueError:
                    continue
                stack.extend((dest, c.action) for c in branch.choices)
        return sorted(
            f"{loc.value}/{action}"
            for loc, action, _ in self.beats()
            if (loc, action) not in reached
        )


def _check_conditions(path: str, branch: Branch, known: Callable[[str], bool]) -> List[str]:
    problems = []
    for cond in branch.conditions:
        ctype = cond.get("type")
        if not ctype or not known(ctype):
            problems.append(f"{path}: unknown condition type {ctype!r}")
            continue
        if ctype in {"flag_set", "flag_clear"} and cond.get("flag") not in _flag_names():
            problems.append(f"{path}: unknown flag {cond.get('flag')!r}")
        if ctype == "has_item" and cond.get("item") not in _item_names():
            problems.append(f"{path}: unknown item {cond.get('item')!r}")
    return problems


def _check_effects(path: str, branch: Branch, known: Callable[[str], bool]) -> List[str]:
    problems = []
    for eff in branch.effects:
        etype = eff.get("type")
        if not etype or not known(etype):
            problems.append(f"{path}: unknown effect type {etype!r}")
            continue
        if etype in {"typed", "instant"}:
            if eff.get("style", "narrative") not in STYLES:
                problems.append(f"{path}: unknown style {eff.get('style')!r}")
            if etype == "typed" and "speed" in eff:
                speed = eff["speed"]
                if isinstance(speed, bool) or not isinstance(speed, int) or speed < 0:
                    problems.append(f"{path}: speed must be a non-negative integer")
        elif etype == "move" and eff.get("to") not in {loc.value for loc in Location}:
            problems.append(f"{path}: unknown location {eff.get('to')!r}")
        elif etype == "set_flag" and eff.get("flag") not in _flag_names():
            problems.append(f"{path}: unknown flag {eff.get('flag')!r}")
        elif etype == "add_item" and eff.get("item") not in _item_names():
            problems.append(f"{path}: unknown item {eff.get('item')!r}")
        elif etype == "status" and not eff.get("value"):
            problems.append(f"{path}: status effect needs a value")
    return problems


def _flag_names():
    return set(Flags.names())


def _item_names():
    return {item.value for item in Item}

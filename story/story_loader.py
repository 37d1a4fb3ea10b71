from typing import Dict, Any, List, Optional, Tuple
import json
import logging
from pathlib import Path

from engine.choices import Choice
from engine.errors import StoryValidationError
from engine.state import Location
from story.conditions import ConditionRegistry
from story.effects import EffectRegistry
from story.story_graph import Branch, StoryGraph

logger = logging.getLogger(__name__)

DEFAULT_STORY_PATH = Path(__file__).resolve().parents[1] / "game-data" / "story.json"


class StoryLoader:
    """
    Resolves a story file into a validated StoryGraph:
    - beats keyed by location then action
    - branches with conditions, effects and next choices

    No game logic here. Pure data wiring.
    """

    def __init__(
        self,
        conditions: Optional[ConditionRegistry] = None,
        effects: Optional[EffectRegistry] = None,
    ):
        self.conditions = conditions or ConditionRegistry()
        self.effects = effects or EffectRegistry()

        self._cache: Dict[Path, StoryGraph] = {}

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def load(self, path: str | Path = DEFAULT_STORY_PATH) -> StoryGraph:
        path = Path(path).resolve()
        if path in self._cache:
            return self._cache[path]

        if not path.exists():
            raise FileNotFoundError(f"Missing story file: {path}")

        with open(path, "r", encoding="utf-8") as f:
            story_def = json.load(f)

        graph = self.build(story_def)
        logger.info("Loaded story %s from %s", graph.story_id, path)
        self._cache[path] = graph
        return graph

    def build(self, story_def: Dict[str, Any]) -> StoryGraph:
        """
        Returns a StoryGraph for an already-parsed story definition.
        Raises StoryValidationError listing every problem found.
        """
        graph, problems = self.parse(story_def)
        if graph is not None:
            problems.extend(graph.validate(self.conditions.known, self.effects.known))
        if problems:
            raise StoryValidationError(problems)
        return graph

    def parse(self, story_def: Dict[str, Any]) -> Tuple[Optional[StoryGraph], List[str]]:
        problems: List[str] = []
        if not isinstance(story_def, dict):
            return None, ["story: expected an object"]

        story_id = story_def.get("id")
        if not story_id:
            problems.append("story: missing 'id'")

        raw_beats = story_def.get("beats")
        if not isinstance(raw_beats, dict):
            problems.append("story: 'beats' must be an object of location -> actions")
            return None, problems

        beats: Dict[Location, Dict[str, Tuple[Branch, ...]]] = {}
        for loc_key, actions in raw_beats.items():
            try:
                location = Location(loc_key)
            except ValueError:
                problems.append(f"{loc_key}: unknown location")
                continue
            if not isinstance(actions, dict):
                problems.append(f"{loc_key}: expected an object of action -> branches")
                continue
            beats[location] = {}
            for action, branches in actions.items():
                parsed = self._parse_branches(f"{loc_key}/{action}", branches, problems)
                if parsed is not None:
                    beats[location][action] = parsed

        graph = StoryGraph(
            story_id or "unknown",
            beats,
            condition_evaluator=self.conditions.evaluate,
            effect_executor=self.effects.execute,
            title=story_def.get("title"),
        )
        return graph, problems

    # ──────────────────────────────────────────────
    # Branches
    # ──────────────────────────────────────────────

    def _parse_branches(self, path: str, raw: Any, problems: List[str]) -> Optional[Tuple[Branch, ...]]:
        if not isinstance(raw, list):
            problems.append(f"{path}: expected a list of branches")
            return None

        branches = []
        for idx, b in enumerate(raw):
            bpath = f"{path}[{idx}]"
            if not isinstance(b, dict):
                problems.append(f"{bpath}: expected an object")
                continue
            conditions = b.get("conditions", [])
            effects = b.get("effects", [])
            if not _all_dicts(conditions):
                problems.append(f"{bpath}: 'conditions' must be a list of objects")
                continue
            if not _all_dicts(effects):
                problems.append(f"{bpath}: 'effects' must be a list of objects")
                continue
            choices = []
            for c in b.get("choices", []):
                if not isinstance(c, dict) or not c.get("label") or not c.get("action"):
                    problems.append(f"{bpath}: choices need 'label' and 'action'")
                    continue
                choices.append(Choice(c["label"], c["action"]))
            branches.append(Branch(
                conditions=tuple(conditions),
                effects=tuple(effects),
                choices=tuple(choices),
            ))
        return tuple(branches)


def _all_dicts(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, dict) for v in value)


def load_story(path: str | Path = DEFAULT_STORY_PATH) -> StoryGraph:
    return StoryLoader().load(path)

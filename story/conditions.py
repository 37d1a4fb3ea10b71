from typing import Dict, Any, Callable

from engine.state import Item


ConditionFn = Callable[[Dict[str, Any], Dict[str, Any]], bool]


class ConditionRegistry:
    """
    Central registry for story branch conditions.
    Conditions must be:
      - pure (no side effects)
      - deterministic
      - fast
    """

    def __init__(self):
        self._conditions: Dict[str, ConditionFn] = {}

        # register built-ins
        self.register("always", self._always)
        self.register("flag_set", self._flag_set)
        self.register("flag_clear", self._flag_clear)
        self.register("has_item", self._has_item)

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def register(self, name: str, fn: ConditionFn):
        if name in self._conditions:
            raise ValueError(f"Condition already registered: {name}")
        self._conditions[name] = fn

    def known(self, name: str) -> bool:
        return name in self._conditions

    def evaluate(self, condition: Dict[str, Any], context: Dict[str, Any]) -> bool:
        """
        condition = { "type": "...", ... }
        context = { "state": GameState, ... } built by the story graph
        """
        ctype = condition.get("type")
        if not ctype:
            raise ValueError("Condition missing 'type'")

        if ctype not in self._conditions:
            raise KeyError(f"Unknown condition type: {ctype}")

        return self._conditions[ctype](condition, context)

    # ──────────────────────────────────────────────
    # Built-in Conditions
    # ──────────────────────────────────────────────

    def _always(self, cond, ctx) -> bool:
        return True

    def _flag_set(self, cond, ctx) -> bool:
        """
        cond: { "type": "flag_set", "flag": "has_sword" }
        """
        flag = cond.get("flag")
        if not flag:
            raise ValueError("flag_set condition missing 'flag'")
        return ctx["state"].flags.get(flag)

    def _flag_clear(self, cond, ctx) -> bool:
        """
        cond: { "type": "flag_clear", "flag": "has_key" }
        """
        flag = cond.get("flag")
        if not flag:
            raise ValueError("flag_clear condition missing 'flag'")
        return not ctx["state"].flags.get(flag)

    def _has_item(self, cond, ctx) -> bool:
        """
        cond: { "type": "has_item", "item": "key" }
        """
        item = cond.get("item")
        if not item:
            raise ValueError("has_item condition missing 'item'")
        return ctx["state"].has_item(Item(item))

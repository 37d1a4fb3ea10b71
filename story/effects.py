from typing import Dict, Any, Callable

from engine.instructions import DEFAULT_SPEED, Instant, Typed, blank, separator
from engine.state import ITEM_FLAGS, Item, Location


EffectFn = Callable[[Dict[str, Any], Dict[str, Any]], None]

ITEM_NOTICE_SPEED = 25


class EffectRegistry:
    """
    Executes the effects listed in a story branch, in order.

    Effects are commands, not logic.
    They may:
      - append render instructions to ctx["instructions"]
      - replace ctx["state"] with an updated GameState

    The context is built fresh for every resolution, so running the same
    effects against the same state always yields the same result.
    """

    def __init__(self):
        self._effects: Dict[str, EffectFn] = {}

        # register built-ins
        self.register("typed", self._typed)
        self.register("instant", self._instant)
        self.register("blank", self._blank)
        self.register("separator", self._separator)
        self.register("move", self._move)
        self.register("set_flag", self._set_flag)
        self.register("add_item", self._add_item)
        self.register("status", self._status)

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def register(self, name: str, fn: EffectFn):
        if name in self._effects:
            raise ValueError(f"Effect already registered: {name}")
        self._effects[name] = fn

    def known(self, name: str) -> bool:
        return name in self._effects

    def execute(self, effect: Dict[str, Any], context: Dict[str, Any]):
        """
        effect = { "type": "...", ... }
        context = { "state": GameState, "instructions": list }
        """
        etype = effect.get("type")
        if not etype:
            raise ValueError("Effect missing 'type'")

        if etype not in self._effects:
            raise KeyError(f"Unknown effect type: {etype}")

        self._effects[etype](effect, context)

    # ──────────────────────────────────────────────
    # Output effects
    # ──────────────────────────────────────────────

    def _typed(self, effect, ctx):
        """
        effect:
          { "type": "typed", "text": "> A dark cave looms before you.", "style": "narrative", "speed": 35 }
        """
        ctx["instructions"].append(Typed(
            effect.get("text", ""),
            effect.get("style", "narrative"),
            int(effect.get("speed", DEFAULT_SPEED)),
        ))

    def _instant(self, effect, ctx):
        ctx["instructions"].append(Instant(
            effect.get("text", ""),
            effect.get("style", "narrative"),
        ))

    def _blank(self, effect, ctx):
        ctx["instructions"].append(blank())

    def _separator(self, effect, ctx):
        ctx["instructions"].append(separator())

    # ──────────────────────────────────────────────
    # State effects
    # ──────────────────────────────────────────────

    def _move(self, effect, ctx):
        """
        effect:
          { "type": "move", "to": "cave" }
        """
        target = effect.get("to")
        if not target:
            raise ValueError("move effect missing 'to'")
        ctx["state"] = ctx["state"].moved_to(Location(target))

    def _set_flag(self, effect, ctx):
        """
        effect:
          { "type": "set_flag", "flag": "dragon_defeated", "value": true }
        """
        flag = effect.get("flag")
        if not flag:
            raise ValueError("set_flag effect missing 'flag'")
        ctx["state"] = ctx["state"].with_flag(flag, effect.get("value", True))

    def _add_item(self, effect, ctx):
        """
        effect:
          { "type": "add_item", "item": "sword" }

        Re-adding a held item is a no-op: no duplicate, no second notice.
        """
        raw = effect.get("item")
        if not raw:
            raise ValueError("add_item effect missing 'item'")
        item = Item(raw)
        state = ctx["state"]
        if state.has_item(item):
            return
        ctx["state"] = state.with_item(item).with_flag(ITEM_FLAGS[item], True)
        ctx["instructions"].append(Typed(
            f">> ITEM ACQUIRED: {item.label.upper()}",
            "success",
            ITEM_NOTICE_SPEED,
        ))

    def _status(self, effect, ctx):
        """
        effect:
          { "type": "status", "value": "IN COMBAT" }
        """
        value = effect.get("value")
        if not value:
            raise ValueError("status effect missing 'value'")
        ctx["state"] = ctx["state"].with_status(value)

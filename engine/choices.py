from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class Choice:
    label: str
    action: str


class ChoiceRegistry:
    """
    Short-lived token -> action mapping for exactly one turn.
    Keys are the contiguous integers 1..N in the order the choices were declared.
    """

    def __init__(self, choices: Iterable[Choice] = ()):
        self._choices: Dict[int, Choice] = {
            i: c for i, c in enumerate(choices, start=1)
        }

    @classmethod
    def empty(cls) -> "ChoiceRegistry":
        return cls()

    def resolve(self, token: str) -> Optional[str]:
        # Exact key text only: "01" and non-ASCII digits are not keys.
        raw = (token or "").strip()
        for key, choice in self._choices.items():
            if str(key) == raw:
                return choice.action
        return None

    def offers(self, action: str) -> bool:
        return any(c.action == action for c in self._choices.values())

    def keys(self) -> List[int]:
        return list(self._choices)

    def actions(self) -> List[str]:
        return [c.action for c in self._choices.values()]

    def items(self):
        return self._choices.items()

    def as_payload(self) -> List[Dict[str, object]]:
        return [{"key": k, "label": c.label, "action": c.action} for k, c in self._choices.items()]

    def __len__(self) -> int:
        return len(self._choices)

    def __bool__(self) -> bool:
        return bool(self._choices)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChoiceRegistry):
            return NotImplemented
        return self._choices == other._choices

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {c.action}" for k, c in self._choices.items())
        return f"ChoiceRegistry({{{inner}}})"

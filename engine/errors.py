from __future__ import annotations

from typing import Iterable, List


class GraphInconsistencyError(RuntimeError):
    """
    Raised when the engine is asked to do something the story graph or the
    turn protocol does not allow: applying an action that was never offered,
    reaching a (location, action) pair with no outcome, or advancing while
    the render queue is still draining.

    These are integration defects. Never catch-and-continue.
    """


class StoryValidationError(ValueError):
    """Story data failed validation. `problems` holds every message found."""

    def __init__(self, problems: Iterable[str]):
        self.problems: List[str] = list(problems)
        summary = "; ".join(self.problems[:5])
        if len(self.problems) > 5:
            summary += f" (+{len(self.problems) - 5} more)"
        super().__init__(f"Invalid story: {summary}")

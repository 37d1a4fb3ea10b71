from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from engine.state import Item


class RenderSink(ABC):
    """
    Output surface abstraction. The render queue writes styled lines to it;
    the input gate shows and hides choices.
    Sinks may be a terminal, a web session, a test recorder, etc.

    Line writes always arrive as open_line, zero or more append_text, then
    close_line, and only ever from one writer at a time.
    """

    @abstractmethod
    def open_line(self, style: str, speed: int = 0) -> None:
        pass

    @abstractmethod
    def append_text(self, chunk: str) -> None:
        pass

    @abstractmethod
    def close_line(self) -> None:
        pass

    @abstractmethod
    def show_choices(self, choices: List[Dict[str, Any]]) -> None:
        """
        choices: [{"key": 1, "label": "Go Left", "action": "left"}, ...]
        """
        pass

    @abstractmethod
    def hide_choices(self) -> None:
        pass

    @abstractmethod
    def show_status(self, status: str, inventory: Tuple[Item, ...]) -> None:
        pass

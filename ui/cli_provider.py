from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, TextIO, Tuple

from engine.state import Item, format_inventory, format_status
from ui.sink import RenderSink

ANSI_RESET = "\033[0m"
STYLE_COLORS = {
    "narrative": "\033[32m",
    "system": "\033[90m",
    "prompt": "\033[96m",
    "success": "\033[93m",
    "error": "\033[91m",
}


class CLIProvider(RenderSink):
    def __init__(self, out: Optional[TextIO] = None, color: bool = True):
        self.out = out or sys.stdout
        self.color = color

    def _write(self, text: str) -> None:
        self.out.write(text)
        self.out.flush()

    def open_line(self, style: str, speed: int = 0) -> None:
        if self.color:
            self._write(STYLE_COLORS.get(style, ""))

    def append_text(self, chunk: str) -> None:
        self._write(chunk)

    def close_line(self) -> None:
        if self.color:
            self._write(ANSI_RESET)
        self._write("\n")

    def show_choices(self, choices: List[Dict[str, Any]]) -> None:
        print(file=self.out)
        for c in choices:
            print(f"[{c['key']}] {c['label']}", file=self.out)
        self.out.flush()

    def hide_choices(self) -> None:
        # Terminal output is append-only; nothing to retract.
        pass

    def show_status(self, status: str, inventory: Tuple[Item, ...]) -> None:
        print(f"{format_status(status)}  |  {format_inventory(inventory)}", file=self.out)
        self.out.flush()

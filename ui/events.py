"""
Shared UI event payload builders.
Web clients receive these as JSON; the CLI renders straight to the terminal.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from engine.state import Item, format_inventory, format_status


def emit_event(sink, payload: Dict[str, Any]) -> None:
    """
    Emit a structured event to whatever session the sink is bound to.
    Sinks without a session (CLI, tests) ignore structured events.
    """
    session = getattr(sink, "session", None)
    if session is not None and hasattr(session, "emit"):
        session.emit(payload)


def build_line(text: str, style: str, speed: int = 0) -> Dict[str, Any]:
    """
    speed > 0 asks the client to type the line out at that many ms per
    character; 0 means show it at once.
    """
    return {"type": "line", "style": style, "text": text, "speed": int(speed)}


def build_choices(choices: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "type": "choices",
        "choices": [
            {"key": c.get("key"), "label": c.get("label")}
            for c in choices
            if isinstance(c, dict)
        ],
    }


def build_clear_choices() -> Dict[str, Any]:
    return {"type": "choices", "choices": []}


def build_status(status: str, inventory: Tuple[Item, ...]) -> Dict[str, Any]:
    return {
        "type": "status",
        "status": status,
        "statusText": format_status(status),
        "inventory": [i.value for i in inventory],
        "inventoryText": format_inventory(inventory),
    }

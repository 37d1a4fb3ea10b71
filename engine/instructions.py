from __future__ import annotations

from dataclasses import dataclass
from typing import Union


STYLES = ("narrative", "system", "prompt", "success", "error")

DEFAULT_SPEED = 35
SEPARATOR = "═" * 60


@dataclass(frozen=True)
class Typed:
    """Paced output: one character every `speed` milliseconds."""
    text: str
    style: str = "narrative"
    speed: int = DEFAULT_SPEED

    def __post_init__(self):
        _check_style(self.style)
        if self.speed < 0:
            raise ValueError(f"Typed speed must be >= 0, got {self.speed}")


@dataclass(frozen=True)
class Instant:
    text: str
    style: str = "narrative"

    def __post_init__(self):
        _check_style(self.style)


RenderInstruction = Union[Typed, Instant]


def _check_style(style: str) -> None:
    if style not in STYLES:
        raise ValueError(f"Unknown style: {style}")


def separator() -> Instant:
    return Instant(SEPARATOR, "system")


def blank() -> Instant:
    return Instant("", "narrative")

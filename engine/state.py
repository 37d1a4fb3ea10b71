from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple


class Location(str, Enum):
    START = "start"
    CAVE = "cave"
    VILLAGE = "village"
    DRAGON = "dragon"
    END_WIN = "end_win"
    END_REST = "end_rest"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_LOCATIONS


TERMINAL_LOCATIONS = frozenset({Location.END_WIN, Location.END_REST})


class Item(str, Enum):
    SWORD = "sword"
    KEY = "key"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Picking up an item also raises its progress flag.
ITEM_FLAGS = {
    Item.SWORD: "has_sword",
    Item.KEY: "has_key",
}


@dataclass(frozen=True)
class Flags:
    has_key: bool = False
    has_sword: bool = False
    dragon_defeated: bool = False

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(cls.__dataclass_fields__)

    def get(self, name: str) -> bool:
        if name not in self.names():
            raise KeyError(f"Unknown flag: {name}")
        return getattr(self, name)

    def set(self, name: str, value: bool = True) -> "Flags":
        if name not in self.names():
            raise KeyError(f"Unknown flag: {name}")
        return replace(self, **{name: bool(value)})


@dataclass(frozen=True)
class GameState:
    location: Location = Location.START
    flags: Flags = field(default_factory=Flags)
    inventory: Tuple[Item, ...] = ()
    status: str = "READY"

    def has_item(self, item: Item) -> bool:
        return item in self.inventory

    def with_item(self, item: Item) -> "GameState":
        """
        Ordered-set insert. Returns self unchanged if the item is already held.
        """
        if item in self.inventory:
            return self
        return replace(self, inventory=self.inventory + (item,))

    def moved_to(self, location: Location) -> "GameState":
        return replace(self, location=location)

    def with_flag(self, name: str, value: bool = True) -> "GameState":
        return replace(self, flags=self.flags.set(name, value))

    def with_status(self, status: str) -> "GameState":
        return replace(self, status=status)

    @property
    def terminal(self) -> bool:
        return self.location.terminal


def initial_state() -> GameState:
    return GameState()


def format_inventory(inventory: Tuple[Item, ...]) -> str:
    if not inventory:
        return "INVENTORY: [EMPTY]"
    return f"INVENTORY: [{', '.join(i.label for i in inventory).upper()}]"


def format_status(status: str) -> str:
    return f"STATUS: {status}"

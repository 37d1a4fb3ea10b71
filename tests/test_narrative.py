import sys
from collections import deque
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.errors import GraphInconsistencyError  # noqa: E402
from engine.instructions import SEPARATOR, Instant, Typed  # noqa: E402
from engine.narrative import RESTART_HINT, NarrativeStateMachine  # noqa: E402
from engine.state import Flags, GameState, Item, Location  # noqa: E402
from story.story_loader import load_story  # noqa: E402


def play(machine, *actions):
    machine.begin()
    for action in actions:
        machine.advance(action)
    return machine.state


def explore(machine):
    """Every (state, offered action) pair reachable from the opening."""
    opening = machine.opening()
    seen = set()
    pairs = []
    queue = deque([(opening.state, opening.registry)])
    while queue:
        state, registry = queue.popleft()
        if state in seen:
            continue
        seen.add(state)
        for action in registry.actions():
            pairs.append((state, action))
            turn = machine.apply(state, action)
            queue.append((turn.state, turn.registry))
    return pairs


class TestNarrativeStateMachine(unittest.TestCase):
    def setUp(self):
        self.machine = NarrativeStateMachine(load_story())

    def test_opening_turn(self):
        turn = self.machine.begin()
        self.assertEqual(turn.state, GameState())
        self.assertEqual(turn.instructions[0].text[:10], "> Welcome,")
        self.assertEqual(turn.registry.actions(), ["left", "right"])
        self.assertEqual(turn.registry.resolve("1"), "left")
        self.assertEqual(turn.registry.resolve("2"), "right")

    def test_regular_turn_starts_with_separator(self):
        self.machine.begin()
        turn = self.machine.advance("left")
        self.assertEqual(turn.instructions[0], Instant(SEPARATOR, "system"))
        self.assertEqual(turn.state.status, "EXPLORING")

    def test_apply_is_deterministic_everywhere(self):
        pairs = explore(self.machine)
        self.assertGreater(len(pairs), 15)
        for state, action in pairs:
            self.assertEqual(self.machine.apply(state, action), self.machine.apply(state, action))

    def test_registry_keys_are_contiguous_after_every_turn(self):
        for state, action in explore(self.machine):
            turn = self.machine.apply(state, action)
            self.assertEqual(turn.registry.keys(), list(range(1, len(turn.registry) + 1)))
            if turn.terminal:
                self.assertEqual(len(turn.registry), 0)
            else:
                self.assertGreater(len(turn.registry), 0)

    def test_apply_does_not_touch_owned_state(self):
        self.machine.begin()
        before = self.machine.state
        self.machine.apply(before, "left")
        self.assertIs(self.machine.state, before)

    def test_inventory_add_is_idempotent(self):
        self.machine.begin()
        self.machine.advance("left")
        first = self.machine.advance("pickupSword")
        self.machine.advance("goBack")
        self.machine.advance("left")
        second = self.machine.advance("pickupSword")

        def notices(turn):
            return [i for i in turn.instructions if "ITEM ACQUIRED" in i.text]

        self.assertEqual(len(notices(first)), 1)
        self.assertEqual(notices(second), [])
        self.assertEqual(self.machine.state.inventory, (Item.SWORD,))

    def test_action_not_on_offer_raises(self):
        self.machine.begin()
        with self.assertRaises(GraphInconsistencyError):
            self.machine.advance("fightDragon")
        self.assertEqual(self.machine.state, GameState())

    def test_undefined_pair_raises(self):
        with self.assertRaises(GraphInconsistencyError):
            self.machine.apply(GameState(), "openChest")

    def test_advance_while_busy_raises(self):
        busy = {"value": False}
        machine = NarrativeStateMachine(load_story(), is_busy=lambda: busy["value"])
        machine.begin()
        busy["value"] = True
        with self.assertRaises(GraphInconsistencyError):
            machine.advance("left")
        self.assertEqual(machine.state.location, Location.START)

    def test_terminal_turn_ends_with_restart_hint(self):
        state = play(self.machine, "right", "exploreVillage")
        turn = self.machine.apply(state, "restInn")
        self.assertEqual(turn.instructions[-1], Typed(RESTART_HINT, "prompt"))
        self.assertEqual(len(turn.registry), 0)
        self.assertTrue(turn.terminal)

    def test_ending_turns_open_with_two_rules(self):
        rule = Instant(SEPARATOR, "system")
        rest = self.machine.apply(play(self.machine, "right", "exploreVillage"), "restInn")
        self.assertEqual(rest.instructions[:2], (rule, rule))

        state = play(self.machine, "right", "takeKey", "goToCave", "pickupSword", "enterCave", "fightDragon")
        win = self.machine.apply(state, "openChest")
        self.assertEqual(win.instructions[:2], (rule, rule))
        self.assertEqual(win.instructions[2], Typed("> You insert the key into the lock..."))

    def test_apply_at_terminal_raises(self):
        play(self.machine, "right", "exploreVillage", "restInn")
        with self.assertRaises(GraphInconsistencyError):
            self.machine.apply(self.machine.state, "goToCave")

    def test_restart_resets_everything(self):
        play(self.machine, "right", "takeKey")
        turn = self.machine.restart()
        self.assertEqual(self.machine.state, GameState())
        self.assertEqual(turn.registry.actions(), ["left", "right"])


class TestScenarios(unittest.TestCase):
    def setUp(self):
        self.machine = NarrativeStateMachine(load_story())

    def test_dragon_slain_without_key(self):
        state = play(self.machine, "left", "pickupSword", "enterCave", "fightDragon")
        self.assertEqual(state.location, Location.DRAGON)
        self.assertTrue(state.flags.dragon_defeated)
        self.assertFalse(state.flags.has_key)
        self.assertEqual(self.machine.registry.actions(), ["goBack"])
        self.assertFalse(state.terminal)

    def test_key_and_sword_win(self):
        state = play(
            self.machine,
            "right", "takeKey", "goToCave", "pickupSword", "enterCave", "fightDragon", "openChest",
        )
        self.assertEqual(state.inventory, (Item.KEY, Item.SWORD))
        self.assertEqual(state.location, Location.END_WIN)
        self.assertEqual(state.status, "GAME COMPLETE")
        self.assertEqual(len(self.machine.registry), 0)

    def test_rest_at_inn(self):
        state = play(self.machine, "right", "exploreVillage", "restInn")
        self.assertEqual(state.location, Location.END_REST)
        self.assertEqual(state.inventory, ())
        self.assertEqual(state.status, "GAME OVER")

    def test_enter_cave_without_sword(self):
        state = play(self.machine, "left", "enterCave")
        self.assertEqual(state.location, Location.CAVE)
        self.assertEqual(state.flags, Flags())
        self.assertEqual(self.machine.registry.actions(), ["goBack"])

    def test_sneak_past_returns_to_cave(self):
        state = play(self.machine, "left", "pickupSword", "enterCave", "sneakPast")
        self.assertEqual(state.location, Location.CAVE)
        self.assertEqual(self.machine.registry.actions(), ["goBack"])
        state = play(self.machine, "left", "pickupSword", "enterCave", "sneakPast", "goBack")
        self.assertEqual(state.location, Location.START)


if __name__ == "__main__":
    unittest.main()

import io
import sys
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from engine.state import Item  # noqa: E402
from game_session import GameSession  # noqa: E402
from ui.cli_provider import CLIProvider  # noqa: E402
from ui.web_provider import WebProvider  # noqa: E402


class TestCLIProvider(unittest.TestCase):
    def setUp(self):
        self.out = io.StringIO()
        self.sink = CLIProvider(self.out, color=False)

    def test_lines_and_choices(self):
        self.sink.open_line("narrative", 35)
        for ch in "Hi!":
            self.sink.append_text(ch)
        self.sink.close_line()
        self.sink.show_choices([{"key": 1, "label": "Go Left"}, {"key": 2, "label": "Go Right"}])

        self.assertEqual(self.out.getvalue(), "Hi!\n\n[1] Go Left\n[2] Go Right\n")

    def test_status_line(self):
        self.sink.show_status("EXPLORING", (Item.SWORD,))
        self.assertEqual(self.out.getvalue(), "STATUS: EXPLORING  |  INVENTORY: [SWORD]\n")

    def test_color_wraps_line(self):
        sink = CLIProvider(self.out, color=True)
        sink.open_line("error")
        sink.append_text("x")
        sink.close_line()
        self.assertEqual(self.out.getvalue(), "\033[91mx\033[0m\n")


class TestWebProvider(unittest.TestCase):
    def setUp(self):
        self.session = GameSession()
        self.sink = WebProvider(self.session)

    def test_line_emitted_whole_on_close(self):
        self.sink.open_line("prompt", 35)
        self.sink.append_text("What ")
        self.assertEqual(self.session.events, [])
        self.sink.append_text("now?")
        self.sink.close_line()

        self.assertEqual(self.session.drain(), [
            {"type": "line", "style": "prompt", "text": "What now?", "speed": 35},
        ])
        self.assertEqual(self.session.events, [])

    def test_status_and_choices(self):
        self.sink.show_status("READY", (Item.KEY,))
        self.sink.show_choices([{"key": 1, "label": "Go Left", "action": "left"}])
        self.sink.hide_choices()

        status, shown, hidden = self.session.drain()
        self.assertEqual(status["inventory"], ["key"])
        self.assertEqual(status["inventoryText"], "INVENTORY: [KEY]")
        self.assertEqual(status["statusText"], "STATUS: READY")
        self.assertEqual(shown, {"type": "choices", "choices": [{"key": 1, "label": "Go Left"}]})
        self.assertEqual(hidden, {"type": "choices", "choices": []})

    def test_out_of_order_writes_raise(self):
        with self.assertRaises(RuntimeError):
            self.sink.append_text("x")
        with self.assertRaises(RuntimeError):
            self.sink.close_line()
        self.sink.open_line("system")
        with self.assertRaises(RuntimeError):
            self.sink.open_line("system")


if __name__ == "__main__":
    unittest.main()

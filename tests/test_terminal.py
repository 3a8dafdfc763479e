import unittest

from sshtabs.terminal import (
    SCROLLBACK_LINES,
    TerminalView,
    key_to_data,
    strip_controls,
)


class TestKeyToData(unittest.TestCase):
    def test_special_keys(self) -> None:
        self.assertEqual(key_to_data("enter", "\r"), "\r")
        self.assertEqual(key_to_data("up", None), "\x1b[A")
        self.assertEqual(key_to_data("backspace", None), "\x7f")

    def test_ctrl_letters(self) -> None:
        self.assertEqual(key_to_data("ctrl+c", None), "\x03")
        self.assertEqual(key_to_data("ctrl+d", None), "\x04")

    def test_printable_and_unmapped(self) -> None:
        self.assertEqual(key_to_data("a", "a"), "a")
        self.assertIsNone(key_to_data("f12", None))


class TestStripControls(unittest.TestCase):
    def test_keeps_colour_drops_cursor_moves(self) -> None:
        text = "\x1b[31mred\x1b[0m\x1b[2J\x1b[H\x1b]0;title\x07"
        self.assertEqual(strip_controls(text), "\x1b[31mred\x1b[0m")


class TestTerminalView(unittest.TestCase):
    def test_lines_and_carriage_return(self) -> None:
        view = TerminalView(1)

        view.write("first\r\nsecond")
        view.write("\rthird\n")

        self.assertEqual(view.plain_text, "first\nthird\n")

    def test_backspace_removes_last_character(self) -> None:
        view = TerminalView(1)

        view.write("abc\b")

        self.assertEqual(view.plain_text, "ab")

    def test_scrollback_is_bounded(self) -> None:
        view = TerminalView(1)

        view.write("x\n" * (SCROLLBACK_LINES + 50))

        self.assertEqual(len(view.lines), SCROLLBACK_LINES)

    def test_subscribe_and_dispose(self) -> None:
        view = TerminalView(1)
        received = []
        unsubscribe = view.subscribe(received.append)

        view._emit("ls")
        unsubscribe()
        view._emit("pwd")
        view.subscribe(received.append)
        view.dispose()
        view._emit("ignored")
        view.write("after dispose")

        self.assertEqual(received, ["ls"])
        self.assertTrue(view.disposed)
        self.assertNotIn("after dispose", view.plain_text)

    def test_fit_is_none_when_unmounted(self) -> None:
        self.assertIsNone(TerminalView(1).fit())


if __name__ == "__main__":
    unittest.main()

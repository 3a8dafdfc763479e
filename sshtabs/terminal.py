from __future__ import annotations

import re
from typing import Callable, Optional

from rich.text import Text
from textual import events
from textual.widget import Widget

SCROLLBACK_LINES = 2000

SPECIAL_KEYS = {
    "enter": "\r",
    "tab": "\t",
    "shift+tab": "\x1b[Z",
    "backspace": "\x7f",
    "escape": "\x1b",
    "up": "\x1b[A",
    "down": "\x1b[B",
    "right": "\x1b[C",
    "left": "\x1b[D",
    "home": "\x1b[H",
    "end": "\x1b[F",
    "insert": "\x1b[2~",
    "delete": "\x1b[3~",
    "pageup": "\x1b[5~",
    "pagedown": "\x1b[6~",
}

# Everything except SGR (colour) sequences is dropped; this widget keeps no
# cursor model beyond the current line.
ESCAPE_RE = re.compile(
    r"\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[()][A-Za-z0-9]"
    r"|\x1b[=>78cDEHM]"
)
SGR_RE = re.compile(r"\x1b\[[0-9;]*m")
TRAILING_SGR_RE = re.compile(r"(?:\x1b\[[0-9;]*m)+$")


def key_to_data(key: str, character: Optional[str]) -> Optional[str]:
    if key in SPECIAL_KEYS:
        return SPECIAL_KEYS[key]
    if key.startswith("ctrl+") and len(key) == 6 and key[-1].isalpha():
        return chr(ord(key[-1].lower()) - 96)
    if character:
        return character
    return None


def strip_controls(text: str) -> str:
    def keep_sgr(match: re.Match) -> str:
        sequence = match.group(0)
        return sequence if SGR_RE.fullmatch(sequence) else ""

    return ESCAPE_RE.sub(keep_sgr, text)


def _drop_last_char(line: str) -> str:
    trailing = TRAILING_SGR_RE.search(line)
    suffix = trailing.group(0) if trailing else ""
    body = line[: len(line) - len(suffix)]
    if not body:
        return line
    return body[:-1] + suffix


class TerminalView(Widget, can_focus=True):
    """Line-oriented terminal pane for one session.

    Output is appended with :meth:`write`; keystrokes and pastes are handed
    to the subscribed callbacks as the raw data the remote shell expects.
    """

    DEFAULT_CSS = """
    TerminalView {
        width: 1fr;
        height: 1fr;
        background: #000000;
        color: #dcdcdc;
        padding: 0 1;
    }
    """

    def __init__(self, session_id: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.session_id = session_id
        self.lines: list[str] = [""]
        self._carriage_return = False
        self._listeners: list[Callable[[str], None]] = []
        self.disposed = False

    # output

    def write(self, text: str) -> None:
        if self.disposed or not text:
            return
        self._feed(strip_controls(text))
        if len(self.lines) > SCROLLBACK_LINES:
            del self.lines[: len(self.lines) - SCROLLBACK_LINES]
        if self.is_mounted:
            self.refresh()

    def _feed(self, text: str) -> None:
        text = text.replace("\r\n", "\n")
        for chunk in re.split(r"([\n\r\b\x07])", text):
            if not chunk:
                continue
            if chunk == "\n":
                self.lines.append("")
                self._carriage_return = False
            elif chunk == "\r":
                self._carriage_return = True
            elif chunk == "\b":
                self.lines[-1] = _drop_last_char(self.lines[-1])
            elif chunk == "\x07":
                continue
            else:
                if self._carriage_return:
                    self.lines[-1] = ""
                    self._carriage_return = False
                self.lines[-1] += chunk

    @property
    def plain_text(self) -> str:
        return "\n".join(Text.from_ansi(line).plain for line in self.lines)

    def render(self) -> Text:
        height = max(1, self.size.height)
        tail = self.lines[-height:]
        return Text("\n").join(Text.from_ansi(line) for line in tail)

    # input

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, data: str) -> None:
        for listener in list(self._listeners):
            listener(data)

    def on_key(self, event: events.Key) -> None:
        data = key_to_data(event.key, event.character)
        if data is None:
            return
        self._emit(data)
        event.stop()
        event.prevent_default()

    def on_paste(self, event: events.Paste) -> None:
        if event.text:
            self._emit(event.text)
        event.stop()

    # layout

    def fit(self) -> Optional[tuple[int, int]]:
        if self.disposed or not self.is_mounted or not self.display:
            return None
        width, height = self.content_size
        if width <= 0 or height <= 0:
            return None
        return width, height

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self._listeners.clear()
        if self.is_mounted:
            self.remove()

from ui.events import build_choices, build_clear_choices, build_line, build_status, emit_event
from ui.sink import RenderSink


class WebProvider(RenderSink):
    """
    Buffers each line and emits it whole once closed; the browser does the
    typing animation from the line's speed.
    """

    def __init__(self, session):
        self.session = session
        self._style = None
        self._speed = 0
        self._buffer = []

    def open_line(self, style, speed=0):
        if self._style is not None:
            raise RuntimeError("open_line called while a line is already open")
        self._style = style
        self._speed = speed
        self._buffer = []

    def append_text(self, chunk):
        if self._style is None:
            raise RuntimeError("append_text called with no open line")
        self._buffer.append(chunk)

    def close_line(self):
        if self._style is None:
            raise RuntimeError("close_line called with no open line")
        emit_event(self, build_line("".join(self._buffer), self._style, self._speed))
        self._style = None
        self._buffer = []

    def show_choices(self, choices):
        emit_event(self, build_choices(choices))

    def hide_choices(self):
        emit_event(self, build_clear_choices())

    def show_status(self, status, inventory):
        emit_event(self, build_status(status, inventory))

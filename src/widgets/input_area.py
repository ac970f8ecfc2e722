"""
Message input: enter sends, escape interrupts the streaming reply, up and
down walk through what was sent before.
"""
from textual.widgets import Input
from textual.message import Message


class InputArea(Input):
    class Submit(Message, bubble=True):
        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class Interrupt(Message, bubble=True):
        """Escape pressed; the app cancels the turn in flight."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._sent: list[str] = []
        self._recall = 0

    async def on_key(self, event) -> None:
        if event.key == "enter":
            event.stop()
            if self.value.strip():
                self._sent.append(self.value)
                self.post_message(self.Submit(self.value))
            self._recall = len(self._sent)
            self.value = ""
        elif event.key == "escape":
            event.stop()
            self.post_message(self.Interrupt())
        elif event.key in ("up", "down") and self._sent:
            event.stop()
            step = -1 if event.key == "up" else 1
            self._recall = max(0, min(len(self._sent), self._recall + step))
            self.value = self._sent[self._recall] if self._recall < len(self._sent) else ""
            self.cursor_position = len(self.value)

"""
Transcript widget.
"""
from textual.widgets import RichLog


class ChatLog(RichLog):
    def write_error(self, message: str) -> None:
        self.write(f"[bold red]{message}[/bold red]")

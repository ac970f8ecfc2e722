"""
Terminal chat client with code artifacts.
"""

import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from textual import work
from textual.app import App, ComposeResult

from core.config import Settings
from core.orchestrator import Orchestrator
from models import Attachment, Mode
from screens import ArtifactScreen
from widgets import InputArea, ChatLog, SelectOption, SelectionMade, SelectionDismissed
from widgets.commands import COMMANDS, parse_command

MODE_HINTS = {
    Mode.NORMAL: 'plain chat',
    Mode.SEARCH: 'answers backed by a web search',
    Mode.CODE: 'code blocks are collected as artifacts',
    Mode.AUDIO: 'send a recording with /audio; typed text is plain chat',
    Mode.FILE: 'ask about the attached file',
}


class ChatApp(App):
    def __init__(self, settings: Optional[Settings] = None):
        """Initialize the chat application with default state."""
        super().__init__()
        self.settings = settings or Settings.from_env()
        self.event_q = asyncio.Queue()
        self.orchestrator = Orchestrator(self.event_q, self.settings)

        self._answer_buffer: str = ""
        self._pump_worker = None

    def compose(self) -> ComposeResult:
        yield ChatLog(id="chat_log", markup=True, wrap=True)
        yield InputArea(id="input_text", placeholder="how can i help you")
        yield SelectOption(id="input_selection")

    async def on_mount(self) -> None:
        chat_log = self.query_one("#chat_log", ChatLog)
        chat_log.write("[bold green]Welcome![/bold green] [dim]/help lists the commands.[/dim]")
        chat_log.write(f"[dim]backend: {self.settings.backend_url}  mode: {self.orchestrator.modes.mode.value}[/dim]")
        self._change_input_mode(is_selection=False)
        self._pump()

    async def on_unmount(self) -> None:
        await self.orchestrator.aclose()

    async def on_input_area_submit(self, message: InputArea.Submit) -> None:
        chat_log = self.query_one("#chat_log", ChatLog)
        try:
            command = parse_command(message.value)
        except ValueError as exc:
            chat_log.write_error(str(exc))
            return

        if command is None:
            chat_log.write(f"[dim] user: {message.value.strip()} [/dim]")
            self._answer_buffer = ""
            await self.orchestrator.submit(message.value)
            return
        await self._run_command(command.name, command.arg)

    async def _run_command(self, name: str, arg: str) -> None:
        chat_log = self.query_one("#chat_log", ChatLog)
        orch = self.orchestrator

        if name == 'help':
            for cmd, desc in COMMANDS.items():
                chat_log.write(f"[dim]/{cmd:<10} {desc}[/dim]")
        elif name == 'mode' and not arg:
            selection = self.query_one(SelectOption)
            labels = [f"{m.value:<8} {MODE_HINTS[m]}" for m in Mode]
            selection.set_selection_options(labels, [m.value for m in Mode], orch.modes.mode.value)
            self._change_input_mode(is_selection=True)
        elif name == 'mode':
            try:
                await orch.select_mode(Mode.parse(arg))
            except ValueError as exc:
                chat_log.write_error(str(exc))
        elif name == 'attach':
            try:
                await orch.attach(Path(arg).expanduser())
            except OSError as exc:
                chat_log.write_error(f"cannot attach {arg}: {exc}")
        elif name == 'detach':
            await orch.detach()
        elif name == 'audio':
            path = Path(arg).expanduser()
            try:
                data = path.read_bytes()
            except OSError as exc:
                chat_log.write_error(f"cannot read {arg}: {exc}")
                return
            media_type = mimetypes.guess_type(path.name)[0] or 'audio/webm'
            await orch.select_mode(Mode.AUDIO)
            chat_log.write(f"[dim] user: (audio {path.name}) [/dim]")
            await orch.submit("", recording=Attachment(path.name, data, media_type))
        elif name == 'artifacts':
            self.push_screen(ArtifactScreen(orch.artifacts.list()))
        elif name == 'cancel':
            if not await orch.cancel():
                chat_log.write("[dim]nothing to cancel[/dim]")
        elif name == 'reset':
            await orch.reset()
            chat_log.clear()
            chat_log.write("[dim]new conversation[/dim]")

    async def on_input_area_interrupt(self, message: InputArea.Interrupt) -> None:
        await self.orchestrator.cancel()

    async def on_selection_made(self, message: SelectionMade) -> None:
        await self.orchestrator.select_mode(Mode.parse(message.value))
        self._change_input_mode(is_selection=False)

    def on_selection_dismissed(self, message: SelectionDismissed) -> None:
        self._change_input_mode(is_selection=False)

    def _change_input_mode(self, is_selection: bool):
        input_selection = self.query_one('#input_selection')
        input_text = self.query_one('#input_text')

        if is_selection:
            input_selection.visible, input_text.visible = True, False
            input_selection.focus()
        else:
            input_selection.visible, input_text.visible = False, True
            input_text.focus()

    @work(exclusive=True, group='pump')
    async def _pump(self):
        """
        Event processing loop.

        Display text is buffered and written once the turn settles; artifact
        and mode events are written as they happen.
        """
        chat_log = self.query_one("#chat_log", ChatLog)

        while True:
            ev = await self.event_q.get()
            type = ev.get("type", '')

            if type == 'display_text':
                self._answer_buffer += ev.get('text', '')
            elif type == 'artifact_created':
                chat_log.write(f"[cyan]artifact opened: {ev.get('title')}[/cyan]")
            elif type == 'artifact_completed':
                note = ' (stream ended before the end marker)' if ev.get('forced') else ''
                chat_log.write(f"[cyan]artifact complete{note}; /artifacts to view[/cyan]")
            elif type == 'turn_settled':
                chat_log.write(f"assistant: {ev.get('text') or self._answer_buffer}")
                self._answer_buffer = ''
            elif type == 'turn_failed':
                chat_log.write_error(ev.get('message', 'request failed'))
                self._answer_buffer = ''
            elif type == 'turn_cancelled':
                chat_log.write("[dim]response cancelled[/dim]")
                self._answer_buffer = ''
            elif type == 'mode_changed':
                chat_log.write(f"[dim]mode: {ev.get('mode')}[/dim]")
            elif type == 'error':
                chat_log.write_error(ev.get('message', ''))


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        filename='chat.log',
        level=settings.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = ChatApp(settings)
    app.run()


if __name__ == "__main__":
    main()

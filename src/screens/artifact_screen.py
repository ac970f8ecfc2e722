"""
Modal screen listing the artifacts collected in the conversation.
"""

from rich.syntax import Syntax
from textual import on
from textual.widgets import Static, OptionList
from textual.widgets.option_list import Option
from textual.containers import Center, Vertical, VerticalScroll
from textual.screen import ModalScreen

from models import Artifact


class ArtifactScreen(ModalScreen[None]):
    """Pick an artifact on the left, read its content below."""
    CSS = """
#panel {
    width: 90%;
    height: 90%;
    border: round $secondary;
    padding: 1 2;
}
#artifact_options {
    height: auto;
    max-height: 8;
    border: none;
    background: transparent;
}
#artifact_body {
    margin-top: 1;
}
    """
    BINDINGS = [
        ('escape', 'close', 'close'),
        ('q', 'close', 'close'),
    ]

    def __init__(self, artifacts: list[Artifact]) -> None:
        super().__init__()
        self.artifacts = {a.artifact_id: a for a in artifacts}

    def compose(self):
        options = [
            Option(f"{a.title} ({a.status.value}{', forced' if a.forced else ''})", id=a.artifact_id)
            for a in self.artifacts.values()
        ]
        yield Center(
            Vertical(
                Static("[bold]Artifacts[/bold]  [dim](esc to close)[/dim]\n", markup=True),
                OptionList(*options, id="artifact_options"),
                VerticalScroll(
                    Static("[dim]No artifacts yet.[/dim]" if not options else "", id="artifact_body"),
                ),
            ),
            id="panel",
        )

    async def _on_mount(self):
        ol = self.query_one(OptionList)
        ol.focus()
        if self.artifacts:
            ol.highlighted = 0
            self._show(next(iter(self.artifacts)))

    @on(OptionList.OptionHighlighted)
    def on_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        if event.option.id:
            self._show(event.option.id)

    def _show(self, artifact_id: str) -> None:
        artifact = self.artifacts[artifact_id]
        body = self.query_one("#artifact_body", Static)
        body.update(Syntax(artifact.content, artifact.language or "text", line_numbers=True))

    def action_close(self) -> None:
        self.dismiss(None)

from typing import Optional

from textual import on
from textual.widgets import OptionList
from textual.widgets.option_list import Option
from textual.message import Message


class SelectionMade(Message):
    def __init__(self, label: str, value: str) -> None:
        super().__init__()
        self.label = label
        self.value = value


class SelectionDismissed(Message):
    """The picker was closed without choosing."""


class SelectOption(OptionList):
    """Inline picker used for choosing the interaction mode."""

    def __init__(self, id: str, labels: Optional[list[str]] = None) -> None:
        super().__init__(id=id)
        if labels:
            self.add_options(Option(label) for label in labels)

    def set_selection_options(
        self,
        labels: list[str],
        ids: Optional[list[str]] = None,
        current: Optional[str] = None,
    ):
        """Replace the options; `current` (an id) starts highlighted."""
        self.clear_options()
        if ids:
            self.add_options(Option(label, id) for label, id in zip(labels, ids))
        else:
            self.add_options(Option(label) for label in labels)
        self.highlighted = ids.index(current) if ids and current in ids else 0

    @on(OptionList.OptionSelected)
    def on_option_selected(self, event: OptionList.OptionSelected) -> None:
        opt = event.option
        label = str(opt.prompt)
        value = opt.id or label

        self.post_message(SelectionMade(label, value))
        event.stop()

    async def on_key(self, event) -> None:
        if event.key == "escape":
            event.stop()
            self.post_message(SelectionDismissed())

"""
The conversation's active mode and attached resource.
"""

from typing import Optional

from models import Attachment, Mode


class ModeState:
    """
    Exactly one mode is active at a time.

    Attaching a resource forces FILE; removing it while in FILE falls back
    to NORMAL. Toggling a mode that is already active also returns to
    NORMAL.
    """

    def __init__(self, mode: Mode = Mode.NORMAL) -> None:
        self._mode = mode
        self._attachment: Optional[Attachment] = None

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def attachment(self) -> Optional[Attachment]:
        return self._attachment

    def select(self, mode: Mode) -> Mode:
        self._mode = mode
        return self._mode

    def toggle(self, mode: Mode) -> Mode:
        return self.select(Mode.NORMAL if self._mode is mode else mode)

    def attach(self, attachment: Attachment) -> Mode:
        self._attachment = attachment
        return self.select(Mode.FILE)

    def detach(self) -> Mode:
        self._attachment = None
        if self._mode is Mode.FILE:
            self._mode = Mode.NORMAL
        return self._mode

    def reset(self) -> None:
        self._attachment = None
        self._mode = Mode.NORMAL

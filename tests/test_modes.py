import pytest

from core.modes import ModeState
from models import Attachment, Mode

DOC = Attachment('doc.md', b'# title', 'text/markdown')


class TestModeState:
    def test_starts_in_normal(self):
        assert ModeState().mode is Mode.NORMAL

    def test_toggle_switches_and_returns_to_normal(self):
        modes = ModeState()
        assert modes.toggle(Mode.SEARCH) is Mode.SEARCH
        assert modes.toggle(Mode.CODE) is Mode.CODE
        assert modes.toggle(Mode.CODE) is Mode.NORMAL

    def test_attach_forces_file(self):
        modes = ModeState(Mode.CODE)
        assert modes.attach(DOC) is Mode.FILE
        assert modes.attachment == DOC

    def test_detach_in_file_mode_falls_back_to_normal(self):
        modes = ModeState()
        modes.attach(DOC)
        assert modes.detach() is Mode.NORMAL
        assert modes.attachment is None

    def test_detach_elsewhere_keeps_the_mode(self):
        modes = ModeState()
        modes.attach(DOC)
        modes.select(Mode.SEARCH)
        assert modes.detach() is Mode.SEARCH

    def test_reset(self):
        modes = ModeState()
        modes.attach(DOC)
        modes.reset()
        assert (modes.mode, modes.attachment) == (Mode.NORMAL, None)


class TestModeParse:
    @pytest.mark.parametrize('value, mode', [('code', Mode.CODE), (' Search ', Mode.SEARCH), ('FILE', Mode.FILE)])
    def test_names(self, value, mode):
        assert Mode.parse(value) is mode

    def test_unknown(self):
        with pytest.raises(ValueError):
            Mode.parse('turbo')

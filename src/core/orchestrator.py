import asyncio
import logging
import mimetypes
from contextlib import suppress
from pathlib import Path
from typing import Optional, Union

from core.artifact_store import ArtifactStore
from core.config import Settings
from core.dispatcher import DispatchState, ModeDispatcher
from core.domain import UIEvent
from core.errors import PreconditionFailed
from core.frame_decoder import decode_frames
from core.modes import ModeState
from core.transport import HttpTransport
from models import Attachment, Mode, Turn

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    One conversation: history, artifacts, the active mode and at most one
    request in flight.

    History and the artifact collection only change when a turn settles or
    fails. Submitting a new turn while one is streaming cancels the old one,
    which leaves no trace in either.
    """

    def __init__(
        self,
        events_q: asyncio.Queue,
        settings: Optional[Settings] = None,
        transport: Optional[HttpTransport] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.events_q = events_q
        self.transport = transport or HttpTransport(
            self.settings.backend_url, self.settings.connect_timeout,
        )
        self.modes = ModeState()
        self.artifacts = ArtifactStore()
        self.dispatcher = ModeDispatcher(events_q)
        self._history: list[Turn] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._history)

    @property
    def state(self) -> DispatchState:
        return self.dispatcher.state

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _emit(self, ev: UIEvent):
        await self.events_q.put(ev)

    async def submit(self, user_input: str, recording: Optional[Attachment] = None) -> asyncio.Task:
        """Start a turn in the background, cancelling the one in flight first."""
        await self.cancel()
        self._task = asyncio.create_task(self._run_turn(user_input, recording))
        self._task.add_done_callback(self._turn_done)
        return self._task

    def _turn_done(self, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is None:
            return
        exc = task.exception()
        logger.error('turn failed unexpectedly: %r', exc, exc_info=exc)
        self.events_q.put_nowait({'type': 'turn_failed', 'message': f'An error occurred: {exc}'})

    async def run(self, user_input: str, recording: Optional[Attachment] = None) -> Optional[Turn]:
        """Run a turn to completion; returns the assistant turn, or None if nothing was sent."""
        task = await self.submit(user_input, recording)
        return await task

    async def cancel(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        await self._emit({'type': 'turn_cancelled'})
        return True

    async def _run_turn(self, user_input: str, recording: Optional[Attachment]) -> Optional[Turn]:
        mode = self.modes.mode
        attachment = recording if mode is Mode.AUDIO else self.modes.attachment
        turn = Turn.user(user_input, attachment if mode in (Mode.AUDIO, Mode.FILE) else None)

        try:
            request = self.dispatcher.dispatch(mode, turn, self.history, self.settings.mode_params())
        except PreconditionFailed as exc:
            logger.warning('%s: %s', exc.code.value, exc.message)
            await self._emit({'type': 'error', 'code': exc.code.value, 'message': exc.message})
            return None

        session = self.dispatcher.open_session(request, turn)
        try:
            reply = await self.dispatcher.consume(session, decode_frames(self.transport.open(request)))
        except asyncio.CancelledError:
            logger.info('turn in %s mode cancelled, discarding session %s', mode.value, session.session_id)
            raise
        finally:
            self.dispatcher.release(session)

        self._history.extend([session.user_turn, reply])
        if session.state is DispatchState.FAILED:
            await self._emit({'type': 'turn_failed', 'message': reply.text})
        else:
            self.artifacts.absorb(session.artifacts)
            await self._emit({
                'type': 'turn_settled',
                'text': reply.text,
                'artifact_ids': list(reply.artifact_ids),
            })
        return reply

    async def select_mode(self, mode: Mode) -> Mode:
        return await self._mode_changed(self.modes.select(mode))

    async def toggle_mode(self, mode: Mode) -> Mode:
        return await self._mode_changed(self.modes.toggle(mode))

    async def attach(self, source: Union[str, Path, Attachment]) -> Mode:
        """Attach a file (by path or as an Attachment); switches to FILE mode."""
        if not isinstance(source, Attachment):
            path = Path(source)
            media_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
            source = Attachment(filename=path.name, data=path.read_bytes(), media_type=media_type)
        return await self._mode_changed(self.modes.attach(source))

    async def detach(self) -> Mode:
        return await self._mode_changed(self.modes.detach())

    async def _mode_changed(self, mode: Mode) -> Mode:
        ev: UIEvent = {'type': 'mode_changed', 'mode': mode.value}
        await self._emit(ev)
        return mode

    async def reset(self) -> None:
        """Drop the conversation: cancel anything in flight, clear history and artifacts."""
        await self.cancel()
        self._history.clear()
        self.artifacts.clear()
        self.modes.reset()
        await self._mode_changed(self.modes.mode)

    async def aclose(self) -> None:
        await self.cancel()
        await self.transport.aclose()

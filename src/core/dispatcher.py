"""
Mode dispatch: shapes the outbound request for the active mode and turns the
decoded response back into an assistant turn.
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterable, Dict, Optional, Sequence

from core.artifact_store import ArtifactStore
from core.config import SEARCH_SIZES, ModeParams
from core.domain import ErrorEvent, Frame, ScanEvent, UIEvent, display_text
from core.errors import ErrorCode, PreconditionFailed, TransportError
from core.marker_scanner import ScanState, finish, scan
from models import Attachment, ContentPart, Mode, Role, Turn

logger = logging.getLogger(__name__)

ENDPOINTS = {
    Mode.NORMAL: '/chat/stream',
    Mode.SEARCH: '/search/realtime',
    Mode.CODE: '/code',
    Mode.AUDIO: '/audio/talkToGpt',
    Mode.FILE: '/filestream',
}


class DispatchState(str, Enum):
    IDLE = 'idle'
    SENDING = 'sending'
    STREAMING = 'streaming'
    SETTLED = 'settled'
    FAILED = 'failed'


def sanitize_history(history: Sequence[Turn]) -> list[dict[str, str]]:
    """
    Reduce history to plain {role, content} text messages.

    Structured turns keep only their text part, so audio payloads are never
    sent back to the backend.
    """
    return [{'role': t.role.value, 'content': t.text} for t in history]


@dataclass(frozen=True)
class OutboundRequest:
    mode: Mode
    endpoint: str
    new_message: str
    history: tuple
    params: Dict[str, Any]
    attachment: Optional[Attachment] = None
    streaming: bool = True

    def to_httpx(self) -> dict[str, Any]:
        """Keyword arguments for `httpx.AsyncClient.stream('POST', ...)`."""
        history = list(self.history)
        if self.mode is Mode.AUDIO and self.attachment is not None:
            data = {'history': json.dumps(history)} if history else {}
            return {'data': data, 'files': {'audio': self._file_tuple()}}

        if self.mode is Mode.FILE:
            data = {'userInput': self.new_message, 'history': json.dumps(history)}
            data.update({k: str(v) for k, v in self.params.items()})
            return {'data': data, 'files': {'file': self._file_tuple()}}

        body: dict[str, Any] = {'userInput': self.new_message}
        if self.mode is not Mode.SEARCH:
            body['history'] = history
        body.update(self.params)
        return {'json': body}

    def _file_tuple(self):
        a = self.attachment
        return (a.filename, a.data, a.media_type)


def dispatch(mode: Mode, turn: Turn, history: Sequence[Turn], params: ModeParams) -> OutboundRequest:
    """
    Build the request for `turn` in `mode`.

    Raises:
        PreconditionFailed: FILE without an attached resource, an empty
            text turn, or an invalid search size. Nothing has been sent
            when this is raised.

    A typed turn in AUDIO mode carries no recording and goes to the chat
    capability like a NORMAL turn.
    """
    text = turn.text.strip()
    sanitized = sanitize_history(history)
    chat = params.chat

    if mode is Mode.AUDIO and turn.attachment is not None:
        return OutboundRequest(
            mode=mode,
            endpoint=ENDPOINTS[mode],
            new_message=text,
            history=tuple(sanitized),
            params={},
            attachment=turn.attachment,
            streaming=False,
        )

    if mode is Mode.FILE and turn.attachment is None:
        raise PreconditionFailed('file mode needs an attached file')
    if not text:
        raise PreconditionFailed('nothing to send')

    with_user = tuple(sanitized + [{'role': Role.USER.value, 'content': text}])

    if mode is Mode.SEARCH:
        if params.search.size not in SEARCH_SIZES:
            raise PreconditionFailed(f'search size must be one of {SEARCH_SIZES}')
        return OutboundRequest(
            mode=mode,
            endpoint=ENDPOINTS[mode],
            new_message=text,
            history=with_user,
            params={
                'systemInstructions': params.search.instructions,
                'searchSize': params.search.size,
                'model': chat.model,
            },
        )

    if mode is Mode.FILE:
        return OutboundRequest(
            mode=mode,
            endpoint=ENDPOINTS[mode],
            new_message=text,
            history=with_user,
            params={
                'systemInstructions': chat.instructions,
                'model': chat.model,
                'temperature': chat.temperature,
            },
            attachment=turn.attachment,
        )

    return OutboundRequest(
        mode=mode,
        endpoint=ENDPOINTS[Mode.NORMAL if mode is Mode.AUDIO else mode],
        new_message=text,
        history=with_user,
        params={
            'model': chat.model,
            'instructions': chat.instructions,
            'temperature': chat.temperature,
        },
    )


@dataclass
class StreamSession:
    """
    State of one outstanding request.

    The mode is captured when the request is dispatched; switching modes
    while the response streams in does not change how it is decoded.
    Artifacts are staged in a per-turn store and only handed to the
    conversation once the turn settles.
    """
    request: OutboundRequest
    user_turn: Turn
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: DispatchState = DispatchState.SENDING
    artifacts: ArtifactStore = field(default_factory=ArtifactStore)
    display: list[str] = field(default_factory=list)
    body: list[str] = field(default_factory=list)
    scan_state: Optional[ScanState] = None

    def __post_init__(self):
        if self.scan_state is None:
            self.scan_state = ScanState(session_id=self.session_id)

    @property
    def mode(self) -> Mode:
        return self.request.mode

    @property
    def buffered(self) -> bool:
        """The reply is one document read whole (an AUDIO recording turn)."""
        return not self.request.streaming

    @property
    def display_text(self) -> str:
        return ''.join(self.display)


class ModeDispatcher:
    def __init__(self, events_q: Optional[asyncio.Queue] = None):
        self.events_q = events_q
        self.session: Optional[StreamSession] = None

    @property
    def state(self) -> DispatchState:
        return self.session.state if self.session else DispatchState.IDLE

    def dispatch(self, mode: Mode, turn: Turn, history: Sequence[Turn], params: ModeParams) -> OutboundRequest:
        return dispatch(mode, turn, history, params)

    def open_session(self, request: OutboundRequest, user_turn: Turn) -> StreamSession:
        if self.session is not None:
            raise RuntimeError(f'a request is already in flight ({self.session.session_id})')
        self.session = StreamSession(request=request, user_turn=user_turn)
        return self.session

    def release(self, session: StreamSession) -> None:
        """Forget `session`; the dispatcher is IDLE again."""
        if self.session is session:
            self.session = None

    async def _emit(self, ev: UIEvent):
        if self.events_q is not None:
            await self.events_q.put(ev)

    async def consume(self, session: StreamSession, frames: AsyncIterable[Frame]) -> Turn:
        """
        Read `frames` to the end and build the assistant turn.

        A transport failure ends the session as FAILED with a synthetic
        assistant turn describing it; nothing is retried. Cancellation
        propagates to the caller untouched.
        """
        try:
            async for frame in frames:
                if session.state is DispatchState.SENDING:
                    session.state = DispatchState.STREAMING
                if frame['kind'] == 'done':
                    break
                await self._apply_frame(session, frame)
        except TransportError as exc:
            logger.warning('%s on %s: %s', exc.code.value, session.request.endpoint, exc.message)
            session.state = DispatchState.FAILED
            return Turn.assistant(f'An error occurred: {exc.message}')
        finally:
            if (aclose := getattr(frames, 'aclose', None)) is not None:
                await aclose()

        reply = await self._settle(session)
        session.state = DispatchState.SETTLED
        return reply

    async def _apply_frame(self, session: StreamSession, frame: Frame) -> None:
        if frame['kind'] == 'raw':
            await self._text(session, frame['text'])
            return

        payload = frame['json']
        if error := payload.get('error'):
            message = payload.get('message') or error
            logger.warning('backend reported an error: %s', message)
            ev: ErrorEvent = {'type': 'error', 'code': ErrorCode.TRANSPORT_ERROR.value, 'message': str(message)}
            await self._emit(ev)

        content = payload.get('content')
        if isinstance(content, str) and content:
            await self._text(session, content)
        elif session.buffered and 'error' not in payload:
            # the whole reply came as one JSON line
            session.body.append(json.dumps(payload))

    async def _text(self, session: StreamSession, text: str) -> None:
        if session.buffered:
            session.body.append(text)
            return
        if session.mode is not Mode.CODE:
            await self._apply_scan_events(session, [display_text(text)])
            return

        session.scan_state, events = scan(session.scan_state, text)
        await self._apply_scan_events(session, events)

    async def _apply_scan_events(self, session: StreamSession, events: list[ScanEvent]) -> None:
        for ev in events:
            for ui_ev in session.artifacts.apply(ev):
                if ui_ev['type'] == 'display_text':
                    session.display.append(ui_ev['text'])
                await self._emit(ui_ev)

    async def _settle(self, session: StreamSession) -> Turn:
        if session.buffered:
            return self._audio_reply(session)

        if session.mode is Mode.CODE:
            session.scan_state, events = finish(session.scan_state)
            await self._apply_scan_events(session, events)
            ids = [a.artifact_id for a in session.artifacts.list()]
            return Turn.assistant(session.display_text, artifact_ids=ids)

        return Turn.assistant(session.display_text)

    def _audio_reply(self, session: StreamSession) -> Turn:
        raw = ''.join(session.body).strip()
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug('audio reply is not JSON, keeping it as text')
            return Turn.assistant(raw)
        if not isinstance(payload, dict):
            return Turn.assistant(raw)

        parts = _audio_parts(payload)
        transcript = payload.get('userTransCription')
        if isinstance(transcript, str):
            user = session.user_turn
            session.user_turn = Turn(
                role=Role.USER,
                content=(ContentPart('audio', data=user.attachment.data), ContentPart('text', transcript)),
                attachment=user.attachment,
            )
        return Turn.assistant(parts)


def _audio_parts(payload: Dict[str, Any]) -> list[ContentPart]:
    content = payload.get('content')
    if isinstance(content, str):
        return [ContentPart('text', content)]
    if isinstance(payload.get('message'), str):
        return [ContentPart('text', payload['message'])]
    if not isinstance(content, list):
        return [ContentPart('text', 'I processed your audio.')]

    parts = []
    for item in content:
        if not isinstance(item, dict):
            continue
        if item.get('type') == 'audio':
            parts.append(ContentPart('audio', data=_buffer_bytes(item.get('text'))))
        elif item.get('type') == 'text' and isinstance(item.get('text'), str):
            parts.append(ContentPart('text', item['text']))
    return parts


def _buffer_bytes(value: Any) -> Optional[bytes]:
    """Decode a serialized Node Buffer ({"type": "Buffer", "data": [...]})."""
    if isinstance(value, dict):
        value = value.get('data')
    if isinstance(value, list):
        return bytes(value)
    return None

"""
Turns the backend's response body into a sequence of frames.

The body is line oriented: `data:` lines carry a JSON envelope or the
`[DONE]` sentinel, anything else is raw text the backend fell back to.
Chunks arrive with arbitrary boundaries, so a line is only classified once
it is known whether it starts with `data:`.
"""

import codecs
import json
import logging
from typing import AsyncIterable, AsyncIterator, Optional, Union

from core.domain import DataFrame, DoneFrame, Frame, RawFrame

logger = logging.getLogger(__name__)

DATA_PREFIX = 'data:'
DONE_SENTINEL = '[DONE]'


def _data(payload: dict) -> DataFrame:
    return {'kind': 'data', 'json': payload}


def _done() -> DoneFrame:
    return {'kind': 'done'}


def _raw(text: str) -> RawFrame:
    return {'kind': 'raw', 'text': text}


class FrameDecoder:
    """
    Incremental decoder for one response body.

    Only the current, unterminated line is buffered. A line whose start can
    no longer become `data:` is released as raw text as soon as it holds
    something other than whitespace, so plain-text streams stay incremental.
    """

    def __init__(self) -> None:
        self._pending = ""
        self._in_raw_line = False
        self._utf8 = codecs.getincrementaldecoder('utf-8')(errors='replace')
        self.done = False

    def feed(self, chunk: Union[bytes, str]) -> list[Frame]:
        if self.done:
            return []
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        if not chunk:
            return []

        frames: list[Frame] = []
        self._pending += chunk
        while not self.done and (nl := self._pending.find('\n')) != -1:
            line = self._pending[:nl]
            self._pending = self._pending[nl + 1:]
            frames.extend(self._line(line, terminated=True))

        if not self.done and self._pending and self._releasable(self._pending):
            # a trailing \r may be the first half of a CRLF
            held = "\r" if self._pending.endswith("\r") else ""
            text = self._pending[:len(self._pending) - len(held)]
            if text:
                frames.append(_raw(text))
                self._in_raw_line = True
            self._pending = held
        return frames

    def finish(self) -> list[Frame]:
        """Classify whatever is left once the body has ended."""
        if self.done:
            return []
        tail = self._pending + self._utf8.decode(b'', final=True)
        self._pending = ""
        if not tail:
            return []
        return self._line(tail, terminated=False)

    def _releasable(self, partial: str) -> bool:
        if self._in_raw_line:
            return True
        if partial.startswith(DATA_PREFIX) or DATA_PREFIX.startswith(partial):
            return False
        return bool(partial.strip())

    def _line(self, line: str, terminated: bool) -> list[Frame]:
        if line.endswith('\r'):
            line = line[:-1]
        newline = '\n' if terminated else ''

        if self._in_raw_line:
            self._in_raw_line = False
            rest = line + newline
            return [_raw(rest)] if rest else []

        if line.startswith(DATA_PREFIX):
            payload = line[len(DATA_PREFIX):].strip()
            if not payload:
                return []
            if payload == DONE_SENTINEL:
                self.done = True
                return [_done()]
            return [self._parse(payload)]

        if not line.strip():
            return []
        return [_raw(line + newline)]

    @staticmethod
    def _parse(payload: str) -> Frame:
        try:
            value = json.loads(payload)
        except ValueError as exc:
            logger.debug('decode_error: keeping %r as raw text (%s)', payload[:80], exc)
            return _raw(payload)
        if not isinstance(value, dict):
            logger.debug('decode_error: non-object payload %r kept as raw text', payload[:80])
            return _raw(payload)
        return _data(value)


async def decode_frames(
    chunks: AsyncIterable[Union[bytes, str]],
    decoder: Optional[FrameDecoder] = None,
) -> AsyncIterator[Frame]:
    """
    Decode an async stream of body chunks into frames.

    Stops after the first `done` frame; trailing bytes are not read.
    """
    decoder = decoder or FrameDecoder()
    try:
        async for chunk in chunks:
            for frame in decoder.feed(chunk):
                yield frame
            if decoder.done:
                return

        for frame in decoder.finish():
            yield frame
    finally:
        if (aclose := getattr(chunks, 'aclose', None)) is not None:
            await aclose()

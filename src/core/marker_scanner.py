"""
Recovers `[CODE_START:<language>] ... [CODE_END]` artifacts from streamed text.

The scanner is a pair of pure functions over an explicit `ScanState`:

    state = ScanState(session_id='abc')
    state, events = scan(state, 'hello [CODE_START:py]')
    state, events = scan(state, 'print(1)[CODE_END] bye')
    state, events = finish(state)

Text is only released (as display text or artifact content) once it is
proven not to be part of a delimiter. Anything that might still turn into
one is held in `state.residual` until the next chunk decides it, so the
result does not depend on where the chunk boundaries fall.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from core.domain import (
    ArtifactAppendedEvent,
    ArtifactCompletedEvent,
    ArtifactStartedEvent,
    ScanEvent,
    display_text,
)

START_MARKER = '[CODE_START:'
LANGUAGE_CLOSE = ']'
END_MARKER = '[CODE_END]'


class ScanPhase(str, Enum):
    IDLE = 'idle'
    COLLECTING = 'collecting'


@dataclass(frozen=True)
class ScanState:
    session_id: str = 'session'
    phase: ScanPhase = ScanPhase.IDLE
    residual: str = ""
    artifact_id: Optional[str] = None
    language: str = ""
    artifact_count: int = 0

    @property
    def collecting(self) -> bool:
        return self.phase is ScanPhase.COLLECTING


def placeholder(language: str) -> str:
    """Transcript stand-in for an artifact that never saw its end marker."""
    return f'[Code: {language}]'


def partial_marker_match(buffer: str, marker: str) -> int:
    """
    Length of the longest suffix of `buffer` that is a proper prefix of `marker`.

    >>> partial_marker_match('some text [CODE_', '[CODE_END]')
    6
    >>> partial_marker_match('unrelated', '[CODE_END]')
    0
    """
    for size in range(min(len(marker) - 1, len(buffer)), 0, -1):
        if buffer.endswith(marker[:size]):
            return size
    return 0


def _started(artifact_id: str, language: str) -> ArtifactStartedEvent:
    return {'type': 'artifact_started', 'artifact_id': artifact_id, 'language': language}


def _appended(artifact_id: str, text: str) -> ArtifactAppendedEvent:
    return {'type': 'artifact_appended', 'artifact_id': artifact_id, 'text': text}


def _completed(artifact_id: str, forced: bool = False) -> ArtifactCompletedEvent:
    return {'type': 'artifact_completed', 'artifact_id': artifact_id, 'forced': forced}


def scan(state: ScanState, text: str) -> tuple[ScanState, list[ScanEvent]]:
    """Apply one chunk of text to `state`; returns the new state and the events it produced."""
    buffer = state.residual + text
    events: list[ScanEvent] = []

    while True:
        if state.collecting:
            end = buffer.find(END_MARKER)
            if end != -1:
                if end:
                    events.append(_appended(state.artifact_id, buffer[:end]))
                events.append(_completed(state.artifact_id))
                buffer = buffer[end + len(END_MARKER):]
                state = replace(state, phase=ScanPhase.IDLE, artifact_id=None, language="")
                continue

            hold = partial_marker_match(buffer, END_MARKER)
            content = buffer[:len(buffer) - hold]
            if content:
                events.append(_appended(state.artifact_id, content))
            return replace(state, residual=buffer[len(buffer) - hold:]), events

        start = buffer.find(START_MARKER)
        if start == -1:
            hold = partial_marker_match(buffer, START_MARKER)
            shown = buffer[:len(buffer) - hold]
            if shown:
                events.append(display_text(shown))
            return replace(state, residual=buffer[len(buffer) - hold:]), events

        if start:
            events.append(display_text(buffer[:start]))
        tag_open = start + len(START_MARKER)
        close = buffer.find(LANGUAGE_CLOSE, tag_open)
        if close == -1:
            # language tag not closed yet
            return replace(state, residual=buffer[start:]), events

        language = buffer[tag_open:close]
        count = state.artifact_count + 1
        artifact_id = f'{state.session_id}-{count}'
        events.append(_started(artifact_id, language))
        buffer = buffer[close + len(LANGUAGE_CLOSE):]
        state = replace(
            state,
            phase=ScanPhase.COLLECTING,
            artifact_id=artifact_id,
            language=language,
            artifact_count=count,
        )


def finish(state: ScanState) -> tuple[ScanState, list[ScanEvent]]:
    """
    Settle the scanner at end of stream.

    Held text can no longer become a delimiter, so it is released. An
    artifact that is still open is force-completed and the transcript gets
    a placeholder naming its language.
    """
    events: list[ScanEvent] = []
    if state.collecting:
        if state.residual:
            events.append(_appended(state.artifact_id, state.residual))
        events.append(_completed(state.artifact_id, forced=True))
        events.append(display_text(placeholder(state.language)))
    elif state.residual:
        events.append(display_text(state.residual))

    return replace(state, phase=ScanPhase.IDLE, residual="", artifact_id=None, language=""), events

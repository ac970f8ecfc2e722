"""
Events exchanged between the stream decoding stages and the UI surface.

Frames come out of the frame decoder, scan events out of the marker scanner,
and UI events are what the orchestrator puts on the UI queue.
"""

from typing import Any, Literal, TypedDict, Union


class DataFrame(TypedDict):
    kind: Literal['data']
    json: dict[str, Any]


class DoneFrame(TypedDict):
    kind: Literal['done']


class RawFrame(TypedDict):
    kind: Literal['raw']
    text: str


Frame = Union[DataFrame, DoneFrame, RawFrame]


class DisplayTextEvent(TypedDict):
    type: Literal['display_text']
    text: str


class ArtifactStartedEvent(TypedDict):
    type: Literal['artifact_started']
    artifact_id: str
    language: str


class ArtifactAppendedEvent(TypedDict):
    type: Literal['artifact_appended']
    artifact_id: str
    text: str


class ArtifactCompletedEvent(TypedDict):
    type: Literal['artifact_completed']
    artifact_id: str
    forced: bool


ScanEvent = Union[
    DisplayTextEvent, ArtifactStartedEvent, ArtifactAppendedEvent, ArtifactCompletedEvent,
]


class ArtifactCreatedEvent(TypedDict):
    type: Literal['artifact_created']
    artifact_id: str
    language: str
    title: str


class ArtifactUpdatedEvent(TypedDict):
    type: Literal['artifact_updated']
    artifact_id: str
    content: str


class TurnSettledEvent(TypedDict, total=False):
    type: Literal['turn_settled']
    text: str
    artifact_ids: list[str]


class TurnFailedEvent(TypedDict, total=False):
    type: Literal['turn_failed']
    message: str


class TurnCancelledEvent(TypedDict, total=False):
    type: Literal['turn_cancelled']


class ModeChangedEvent(TypedDict, total=False):
    type: Literal['mode_changed']
    mode: str


class ErrorEvent(TypedDict, total=False):
    type: Literal['error']
    code: str
    message: str


UIEvent = Union[
    DisplayTextEvent, ArtifactCreatedEvent, ArtifactUpdatedEvent, ArtifactCompletedEvent,
    TurnSettledEvent, TurnFailedEvent, TurnCancelledEvent, ModeChangedEvent, ErrorEvent,
]


def display_text(text: str) -> DisplayTextEvent:
    return {'type': 'display_text', 'text': text}

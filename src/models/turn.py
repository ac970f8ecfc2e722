"""
Conversation turns and the resources a user can attach to them.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    USER = 'user'
    ASSISTANT = 'assistant'


@dataclass(frozen=True)
class Attachment:
    """A file or audio recording sent along with a user turn."""
    filename: str
    data: bytes
    media_type: str = 'application/octet-stream'


@dataclass(frozen=True)
class ContentPart:
    type: str
    text: str = ""
    data: Optional[bytes] = None


@dataclass(frozen=True)
class Turn:
    """
    A single message in the conversation history.

    Turns are immutable once appended to history. `content` is either plain
    text or a tuple of structured parts (audio replies carry both the audio
    bytes and the transcript).
    """
    role: Role
    content: Union[str, tuple[ContentPart, ...]] = ""
    attachment: Optional[Attachment] = None
    artifact_ids: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def user(cls, text: str, attachment: Optional[Attachment] = None) -> 'Turn':
        return cls(role=Role.USER, content=text, attachment=attachment)

    @classmethod
    def assistant(cls, content, artifact_ids=()) -> 'Turn':
        if isinstance(content, list):
            content = tuple(content)
        return cls(role=Role.ASSISTANT, content=content, artifact_ids=tuple(artifact_ids))

    @property
    def text(self) -> str:
        """The textual part of the turn, whatever shape the content has."""
        if isinstance(self.content, str):
            return self.content
        for part in self.content:
            if part.type == 'text':
                return part.text
        return ""

"""
Artifacts recovered from CODE mode responses.
"""
from dataclasses import dataclass
from enum import Enum


class ArtifactStatus(str, Enum):
    COLLECTING = 'collecting'
    COMPLETE = 'complete'


@dataclass
class Artifact:
    """
    A fenced sub-document pulled out of the assistant's stream.

    `content` only grows while status is COLLECTING; the store refuses any
    mutation once the artifact is COMPLETE.
    """
    artifact_id: str
    language: str
    content: str = ""
    status: ArtifactStatus = ArtifactStatus.COLLECTING
    forced: bool = False

    @property
    def title(self) -> str:
        name = self.language or 'text'
        return f'{name[:1].upper()}{name[1:]} Code'

    @property
    def collecting(self) -> bool:
        return self.status is ArtifactStatus.COLLECTING

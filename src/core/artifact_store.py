"""
Lifecycle of the artifacts discovered in a conversation.
"""

import itertools
from typing import List, Optional

from core.domain import (
    ArtifactCompletedEvent,
    ArtifactCreatedEvent,
    ArtifactUpdatedEvent,
    ScanEvent,
    UIEvent,
)
from core.errors import InternalInconsistencyError
from models import Artifact, ArtifactStatus

_anonymous_ids = itertools.count(1)


class ArtifactStore:
    """
    Ordered collection of artifacts with at most one of them collecting.

    Every mutation names the artifact it is meant for; naming anything
    other than the collecting artifact is a programming defect and raises
    InternalInconsistencyError.
    """

    def __init__(self) -> None:
        self._artifacts: List[Artifact] = []
        self._current: Optional[Artifact] = None

    @property
    def current(self) -> Optional[Artifact]:
        return self._current

    def list(self) -> List[Artifact]:
        return list(self._artifacts)

    def get(self, artifact_id: str) -> Optional[Artifact]:
        return next((a for a in self._artifacts if a.artifact_id == artifact_id), None)

    def __len__(self) -> int:
        return len(self._artifacts)

    def create(self, language: str, artifact_id: Optional[str] = None) -> str:
        if self._current is not None:
            raise InternalInconsistencyError(
                f'cannot open {artifact_id or language!r} while {self._current.artifact_id!r} is collecting'
            )
        artifact_id = artifact_id or f'artifact-{next(_anonymous_ids)}'
        if self.get(artifact_id) is not None:
            raise InternalInconsistencyError(f'duplicate artifact id {artifact_id!r}')

        artifact = Artifact(artifact_id=artifact_id, language=language)
        self._artifacts.append(artifact)
        self._current = artifact
        return artifact_id

    def append(self, artifact_id: str, text: str) -> None:
        self._require_current(artifact_id).content += text

    def complete(self, artifact_id: str, forced: bool = False) -> None:
        artifact = self._require_current(artifact_id)
        artifact.status = ArtifactStatus.COMPLETE
        artifact.forced = forced
        self._current = None

    def clear(self) -> None:
        if self._current is not None:
            raise InternalInconsistencyError(
                f'cannot clear while {self._current.artifact_id!r} is collecting'
            )
        self._artifacts.clear()

    def absorb(self, other: 'ArtifactStore') -> None:
        """Take over the artifacts of a settled per-turn store."""
        if self._current is not None or other.current is not None:
            raise InternalInconsistencyError('cannot absorb artifacts while one is collecting')
        for artifact in other.list():
            if self.get(artifact.artifact_id) is not None:
                raise InternalInconsistencyError(f'duplicate artifact id {artifact.artifact_id!r}')
            self._artifacts.append(artifact)

    def apply(self, event: ScanEvent) -> List[UIEvent]:
        """Apply a scanner event; returns the UI events describing the change."""
        etype = event['type']
        if etype == 'artifact_started':
            artifact_id = self.create(event['language'], event['artifact_id'])
            artifact = self._current
            created: ArtifactCreatedEvent = {
                'type': 'artifact_created',
                'artifact_id': artifact_id,
                'language': artifact.language,
                'title': artifact.title,
            }
            return [created]

        if etype == 'artifact_appended':
            self.append(event['artifact_id'], event['text'])
            updated: ArtifactUpdatedEvent = {
                'type': 'artifact_updated',
                'artifact_id': event['artifact_id'],
                'content': self._current.content,
            }
            return [updated]

        if etype == 'artifact_completed':
            self.complete(event['artifact_id'], forced=event.get('forced', False))
            completed: ArtifactCompletedEvent = {
                'type': 'artifact_completed',
                'artifact_id': event['artifact_id'],
                'forced': event.get('forced', False),
            }
            return [completed]

        return [event]

    def _require_current(self, artifact_id: str) -> Artifact:
        if self._current is None or self._current.artifact_id != artifact_id:
            current = self._current.artifact_id if self._current else None
            raise InternalInconsistencyError(
                f'artifact {artifact_id!r} is not the collecting artifact (current: {current!r})'
            )
        return self._current

"""
Data models for the chat client.
"""
from .artifact import Artifact, ArtifactStatus
from .mode import Mode
from .turn import Attachment, ContentPart, Role, Turn

__all__ = [
    "Artifact", "ArtifactStatus", "Mode",
    "Attachment", "ContentPart", "Role", "Turn",
]

"""
Modal screens for the chat client.
"""
from .artifact_screen import ArtifactScreen

__all__ = ["ArtifactScreen"]

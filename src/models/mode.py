"""
Interaction modes a conversation can be in.
"""
from enum import Enum


class Mode(str, Enum):
    NORMAL = 'normal'
    SEARCH = 'search'
    CODE = 'code'
    AUDIO = 'audio'
    FILE = 'file'

    @classmethod
    def parse(cls, value: str) -> 'Mode':
        """Look a mode up by name, case-insensitively."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f'unknown mode: {value!r}') from None

"""
Runtime settings, read from the environment (and a local .env file).
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_SEARCH_INSTRUCTIONS = (
    "You are a helpful assistant with access to web search. "
    "Provide accurate and up-to-date information based on search results."
)
SEARCH_SIZES = ('low', 'medium', 'high')


@dataclass(frozen=True)
class ChatParams:
    model: str = 'gpt-4o-mini'
    instructions: str = ""
    temperature: float = 0.7


@dataclass(frozen=True)
class SearchParams:
    instructions: str = DEFAULT_SEARCH_INSTRUCTIONS
    size: str = 'medium'


@dataclass(frozen=True)
class ModeParams:
    """Mode-specific request parameters handed to the dispatcher."""
    chat: ChatParams = field(default_factory=ChatParams)
    search: SearchParams = field(default_factory=SearchParams)


@dataclass(frozen=True)
class Settings:
    backend_url: str = 'http://localhost:8000'
    model: str = 'gpt-4o-mini'
    instructions: str = ""
    temperature: float = 0.7
    search_instructions: str = DEFAULT_SEARCH_INSTRUCTIONS
    search_size: str = 'medium'
    connect_timeout: float = 10.0
    log_level: str = 'WARNING'

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from `env`, or from os.environ after loading .env.

        Raises:
            ValueError: a numeric variable does not parse, or the search
                size is not one of low/medium/high.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        search_size = env.get('CHAT_SEARCH_SIZE', cls.search_size).lower()
        if search_size not in SEARCH_SIZES:
            raise ValueError(f'CHAT_SEARCH_SIZE must be one of {SEARCH_SIZES}, got {search_size!r}')

        return cls(
            backend_url=env.get('CHAT_BACKEND_URL', cls.backend_url).rstrip('/'),
            model=env.get('CHAT_MODEL', cls.model),
            instructions=env.get('CHAT_INSTRUCTIONS', cls.instructions),
            temperature=float(env.get('CHAT_TEMPERATURE', cls.temperature)),
            search_instructions=env.get('CHAT_SEARCH_INSTRUCTIONS', cls.search_instructions),
            search_size=search_size,
            connect_timeout=float(env.get('CHAT_CONNECT_TIMEOUT', cls.connect_timeout)),
            log_level=env.get('CHAT_LOG_LEVEL', cls.log_level).upper(),
        )

    def mode_params(self) -> ModeParams:
        return ModeParams(
            chat=ChatParams(self.model, self.instructions, self.temperature),
            search=SearchParams(self.search_instructions, self.search_size),
        )

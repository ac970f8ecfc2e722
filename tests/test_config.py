import pytest

from core.config import DEFAULT_SEARCH_INSTRUCTIONS, Settings


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings == Settings()
        assert settings.search_instructions == DEFAULT_SEARCH_INSTRUCTIONS
        assert settings.log_level == 'WARNING'

    def test_overrides(self):
        settings = Settings.from_env({
            'CHAT_BACKEND_URL': 'https://chat.example.com/api/',
            'CHAT_MODEL': 'gpt-4o',
            'CHAT_TEMPERATURE': '0.1',
            'CHAT_SEARCH_SIZE': 'HIGH',
            'CHAT_CONNECT_TIMEOUT': '3',
            'CHAT_LOG_LEVEL': 'debug',
        })

        assert settings.backend_url == 'https://chat.example.com/api'
        assert settings.model == 'gpt-4o'
        assert settings.temperature == 0.1
        assert settings.search_size == 'high'
        assert settings.connect_timeout == 3.0
        assert settings.log_level == 'DEBUG'

    def test_invalid_search_size(self):
        with pytest.raises(ValueError, match='CHAT_SEARCH_SIZE'):
            Settings.from_env({'CHAT_SEARCH_SIZE': 'huge'})

    def test_invalid_number(self):
        with pytest.raises(ValueError):
            Settings.from_env({'CHAT_TEMPERATURE': 'warm'})

    def test_mode_params(self):
        params = Settings(model='m', instructions='terse', temperature=0.3, search_size='low').mode_params()

        assert (params.chat.model, params.chat.instructions, params.chat.temperature) == ('m', 'terse', 0.3)
        assert params.search.size == 'low'
        assert params.search.instructions == DEFAULT_SEARCH_INSTRUCTIONS

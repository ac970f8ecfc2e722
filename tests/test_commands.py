import pytest

from widgets.commands import Command, parse_command


@pytest.mark.parametrize('text', ['hello', '  what is /mode?', '//not a command', ''])
def test_plain_messages(text):
    assert parse_command(text) is None


@pytest.mark.parametrize('text, expected', [
    ('/mode', Command('mode', '')),
    ('/mode code', Command('mode', 'code')),
    ('  /ATTACH  ~/notes.txt ', Command('attach', '~/notes.txt')),
    ('/audio clip one.webm', Command('audio', 'clip one.webm')),
    ('/reset', Command('reset')),
])
def test_commands(text, expected):
    assert parse_command(text) == expected


def test_unknown_command():
    with pytest.raises(ValueError, match='unknown command'):
        parse_command('/frobnicate')


@pytest.mark.parametrize('name', ['attach', 'audio'])
def test_path_is_required(name):
    with pytest.raises(ValueError, match='file path'):
        parse_command(f'/{name}')

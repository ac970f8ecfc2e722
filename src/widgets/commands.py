"""
Slash commands typed into the input area.
"""
from typing import NamedTuple, Optional

COMMANDS = {
    'mode': 'switch mode (normal, search, code, audio, file); no argument opens the picker',
    'attach': 'attach a file and switch to file mode',
    'detach': 'remove the attached file',
    'audio': 'send an audio recording from a file (audio mode)',
    'artifacts': 'show the artifacts collected so far',
    'cancel': 'stop the response that is streaming',
    'reset': 'start a new conversation',
    'help': 'list commands',
}


class Command(NamedTuple):
    name: str
    arg: str = ""


def parse_command(text: str) -> Optional[Command]:
    """
    Parse `/name arg...`; plain messages return None.

    Raises:
        ValueError: the command is unknown or misses its argument.
    """
    text = text.strip()
    if not text.startswith('/') or text.startswith('//'):
        return None

    name, _, arg = text[1:].partition(' ')
    name, arg = name.lower(), arg.strip()
    if name not in COMMANDS:
        raise ValueError(f"unknown command /{name} (try /help)")
    if name in ('attach', 'audio') and not arg:
        raise ValueError(f"/{name} needs a file path")
    return Command(name, arg)

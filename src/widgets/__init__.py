"""
Custom UI widgets for the chat client.
"""
from .input_area import InputArea
from .chat_log import ChatLog
from .select_option import SelectOption, SelectionMade, SelectionDismissed

__all__ = ["InputArea", "ChatLog", "SelectOption", "SelectionMade", "SelectionDismissed"]

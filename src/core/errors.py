"""
Error taxonomy of the chat core.

DECODE_ERROR never escapes the frame decoder; it only exists so that log
records and UI events can name it.
"""

from enum import Enum


class ErrorCode(str, Enum):
    DECODE_ERROR = 'decode_error'
    TRANSPORT_ERROR = 'transport_error'
    PRECONDITION_FAILED = 'precondition_failed'
    INTERNAL_INCONSISTENCY = 'internal_inconsistency'


class ChatCoreError(Exception):
    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(ChatCoreError):
    """The backend could not be reached or answered with a failure status."""
    code = ErrorCode.TRANSPORT_ERROR


class PreconditionFailed(ChatCoreError):
    """Dispatch was attempted in a mode/state that cannot produce a request."""
    code = ErrorCode.PRECONDITION_FAILED


class InternalInconsistencyError(ChatCoreError):
    """An artifact operation referenced something other than the current artifact."""
    code = ErrorCode.INTERNAL_INCONSISTENCY

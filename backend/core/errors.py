"""Error types for the opportunity table and the message normalizer."""

from collections.abc import Mapping
from typing import Any


UNKNOWN_ERROR = "Unknown error"


class TableError(Exception):
    """Base error carrying an optional structured body.

    The body follows the shapes returned by the remote collaborators:
    a list of ``{"message": ...}`` entries, a single ``{"message": ...}``
    mapping, or nothing (the exception text is the message).
    """

    def __init__(self, message: str = "", body: Any = None):
        super().__init__(message)
        self.message = message
        self.body = body


class LoadError(TableError):
    """The read collaborator failed."""


class SaveError(TableError):
    """The write collaborator failed."""


class ConfigError(TableError):
    """A column specification could not be tokenized."""


def _get(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def _entry_messages(entries: Any) -> list[str]:
    messages = []
    for entry in entries:
        message = _get(entry, "message")
        if message is not None and str(message):
            messages.append(str(message))
    return messages


def reduce_error(error: Any) -> str:
    """Flatten a structured error into one human-readable message.

    Accepts exceptions or plain mappings. Never raises and never returns an
    empty string.
    """
    if error is None:
        return UNKNOWN_ERROR
    try:
        body = _get(error, "body")
        if isinstance(body, (list, tuple)):
            joined = ", ".join(_entry_messages(body))
            return joined or UNKNOWN_ERROR
        if body is not None:
            message = _get(body, "message")
            if isinstance(message, str) and message:
                return message

        message = _get(error, "message")
        if isinstance(message, str) and message:
            return message
        if isinstance(error, BaseException) and str(error):
            return str(error)
    except Exception:
        return UNKNOWN_ERROR
    return UNKNOWN_ERROR

# src/phasefield/errors.py
from __future__ import annotations

__all__ = [
    "PhasefieldError",
    "ExpressionParseError",
    "SystemLoadError",
    "SystemNotFoundError",
    "ConfigError",
]

class PhasefieldError(Exception):
    """Base error for the phasefield package."""


class ExpressionParseError(PhasefieldError):
    """Raised when a formula cannot be parsed.

    Attributes:
        text: the formula as given by the caller
        token: offending token (None when the input ended early or was empty)
        position: character offset of the offending token in ``text`` (or None)
    """
    def __init__(self, message: str, *, text: str = "", token: str | None = None, position: int | None = None):
        self.text = text
        self.token = token
        self.position = position
        self.reason = message
        msg = message
        if text.strip():
            msg += f"\n  in: {text.strip()}"
            if position is not None:
                # caret under the offending token, aligned with the stripped text
                offset = position - (len(text) - len(text.lstrip()))
                msg += "\n      " + " " * max(offset, 0) + "^"
        super().__init__(msg)


class SystemLoadError(PhasefieldError):
    """Raised when a system document (TOML) fails validation or parsing."""
    def __init__(self, message: str):
        super().__init__(message)


class SystemNotFoundError(PhasefieldError):
    """Raised when a system path does not point at a file.

    ``path`` is the absolute path that was checked.
    """
    def __init__(self, uri: str, path: str):
        self.uri = uri
        self.path = path
        super().__init__(f"System not found: {uri} (no file at {path})")


class ConfigError(PhasefieldError):
    """An analysis, particle or trajectory option is out of range or of the wrong type."""

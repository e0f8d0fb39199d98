"""
Exceptions raised while saving or loading games and board files.
"""


class PersistenceError(Exception):
    """Base class for persistence errors."""


class BoardFileError(PersistenceError):
    """A board file could not be read or written."""

    def __init__(self, message: str, filename: str | None = None):
        if filename:
            message = f"{filename}: {message}"
        super().__init__(message)
        self.filename = filename


class DataFormatError(BoardFileError):
    """A board file is readable but its content is invalid."""

    def __init__(self, message: str, filename: str | None = None, entry: int | None = None):
        if entry is not None:
            message = f"tile entry {entry}: {message}"
        super().__init__(message, filename)
        self.entry = entry


class GameNotFoundError(PersistenceError):
    """No saved game with the requested id."""

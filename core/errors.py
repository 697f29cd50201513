# core/errors.py

"""Exceptions raised while checking and repairing index files."""
from pathlib import Path
from typing import Optional


class IndexDoctorError(Exception):
    """Base class for index doctor errors."""
    pass


class IndexReadError(OSError):
    """A fixed-offset read came back short or the seek failed."""

    def __init__(self, path: Path, offset: int, wanted: int, got: int = 0):
        self.path = path
        self.offset = offset
        self.wanted = wanted
        self.got = got
        super().__init__(f"Short read in {path} at offset {offset}: wanted {wanted} bytes, got {got}")


class LedgerParseError(IndexDoctorError):
    """A modlist line could not be decoded into an entry."""

    def __init__(self, line_no: int, reason: str, line: str = ""):
        self.line_no = line_no
        self.reason = reason
        self.line = line
        super().__init__(f"Modlist line {line_no}: {reason}")


class RepairBlocked(IndexDoctorError):
    """The game process holds one of the files that would be written."""

    def __init__(self, locked_paths):
        self.locked_paths = list(locked_paths)
        names = ", ".join(Path(p).name for p in self.locked_paths)
        super().__init__(f"Index files are in use ({names}); close the game and retry")


class RepairFailed(IndexDoctorError):
    """The write went through but the header still does not match."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(message)


class NoBackupsFound(IndexDoctorError):
    """The backup directory does not exist."""

    def __init__(self, backup_dir: Path):
        self.backup_dir = backup_dir
        super().__init__(f"No index backups found in {backup_dir}")

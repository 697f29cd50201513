"""Core data structures for the index doctor."""
from enum import Enum
from pathlib import Path
from typing import FrozenSet, List, NamedTuple, Optional, Sequence

from core.categories import Category
from core.errors import LedgerParseError


class FileStatus(Enum):
    OK = 'ok'
    PROBLEM = 'problem'
    UNKNOWN = 'unknown'


class RepairStatus(Enum):
    NOT_NEEDED = 'not_needed'
    REPAIRED = 'repaired'
    BLOCKED = 'blocked'
    FAILED = 'failed'


class FileCheck(NamedTuple):
    """Outcome of checking one index file."""
    category: str
    file_label: str
    status: FileStatus
    detail: str = ""

    @property
    def is_problem(self) -> bool:
        return self.status is FileStatus.PROBLEM

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'file': self.file_label,
            'status': self.status.value,
            'detail': self.detail,
        }


class HeaderCheckResult(NamedTuple):
    """Shard-count comparison for both index files of a category."""
    category: Category
    files: List[FileCheck]
    found: dict

    @property
    def problem(self) -> bool:
        return any(f.is_problem for f in self.files)


class ModLedgerEntry(NamedTuple):
    """One line of the modlist.

    Offsets are stored the way the patcher writes them: the packed offset
    field multiplied by 8.
    """
    name: Optional[str]
    full_path: str
    dat_file: str
    original_offset: int
    mod_offset: int

    @property
    def packed_original(self) -> int:
        return self.original_offset // 8

    @property
    def packed_mod(self) -> int:
        return self.mod_offset // 8

    @property
    def original_shard(self) -> int:
        return (self.packed_original & 0xF) // 2

    @property
    def display_name(self) -> str:
        if self.full_path:
            return Path(self.full_path.replace('\\', '/')).name
        return self.name or f"<{self.dat_file}>"


class LedgerFinding(NamedTuple):
    """A ledger entry that breaks one of the modlist rules."""
    line_no: int
    entry: ModLedgerEntry
    reason: str


class LedgerReconciliation(NamedTuple):
    """Everything learned from one pass over the modlist."""
    has_problems: bool
    mod_offsets: FrozenSet[int]
    original_offsets: FrozenSet[int]
    entries_read: int = 0
    findings: Sequence[LedgerFinding] = ()
    parse_errors: Sequence[LedgerParseError] = ()
    notes: Sequence[str] = ()

    @classmethod
    def empty(cls, note: Optional[str] = None) -> 'LedgerReconciliation':
        return cls(False, frozenset(), frozenset(), 0, [], [], [note] if note else [])


class RepairOutcome(NamedTuple):
    """Result of a header repair attempt."""
    status: RepairStatus
    message: str = ""
    files_written: Sequence[Path] = ()

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'message': self.message,
            'files_written': [str(p) for p in self.files_written],
        }

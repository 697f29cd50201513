# core/report.py

"""Cumulative problem report filled in by the orchestrator phases."""
from typing import List, Optional

from core.data_structures import FileCheck, FileStatus, LedgerReconciliation, RepairOutcome, RepairStatus


class ProblemReport:
    """Per-category, per-file outcomes plus the aggregate problem flags."""

    def __init__(self):
        self.header: List[FileCheck] = []
        self.header_mismatch = False
        self.repair_outcome: Optional[RepairOutcome] = None

        self.ledger: Optional[LedgerReconciliation] = None
        self.ledger_inconsistent = False
        self.ledger_error = ""

        self.entries: List[FileCheck] = []
        self.suspect_entries = False

        self.backups: List[FileCheck] = []
        self.backup_corrupt = False
        self.no_backups_found = False

        self.diagnostics: List[str] = []

    def note(self, message: str):
        self.diagnostics.append(message)

    @property
    def repair_failed(self) -> bool:
        return self.repair_outcome is not None and \
            self.repair_outcome.status in (RepairStatus.BLOCKED, RepairStatus.FAILED)

    @property
    def has_problems(self) -> bool:
        # Missing backups are reported on their own and are not corruption
        return any((self.header_mismatch, self.ledger_inconsistent, self.suspect_entries,
                    self.backup_corrupt))

    @property
    def files_unreadable(self) -> bool:
        """True when some file could not be read, so its state is unknown."""
        return any(c.status is FileStatus.UNKNOWN for c in self.all_checks())

    def all_checks(self) -> List[FileCheck]:
        return self.header + self.entries + self.backups

    def to_dict(self) -> dict:
        ledger = None
        if self.ledger is not None:
            ledger = {
                'entries_read': self.ledger.entries_read,
                'mod_offsets': len(self.ledger.mod_offsets),
                'original_offsets': len(self.ledger.original_offsets),
                'findings': [
                    {
                        'line': f.line_no,
                        'name': f.entry.display_name,
                        'dat_file': f.entry.dat_file,
                        'reason': f.reason,
                    }
                    for f in self.ledger.findings
                ],
                'parse_errors': [{'line': e.line_no, 'reason': e.reason} for e in self.ledger.parse_errors],
            }
        return {
            'has_problems': self.has_problems,
            'flags': {
                'header_mismatch': self.header_mismatch,
                'ledger_inconsistent': self.ledger_inconsistent,
                'suspect_entries': self.suspect_entries,
                'backup_corrupt': self.backup_corrupt,
                'no_backups_found': self.no_backups_found,
                'files_unreadable': self.files_unreadable,
            },
            'repair': self.repair_outcome.to_dict() if self.repair_outcome else None,
            'header': [c.to_dict() for c in self.header],
            'ledger': ledger,
            'ledger_error': self.ledger_error or None,
            'entries': [c.to_dict() for c in self.entries],
            'backups': [c.to_dict() for c in self.backups],
            'diagnostics': list(self.diagnostics),
        }

# core/orchestrator.py

"""Sequencing of the header, modlist, entry and backup checks."""
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from core.backup_audit import BackupAuditor
from core.categories import Category, CategoryPaths, category_paths
from core.data_structures import FileCheck, LedgerReconciliation, RepairOutcome, RepairStatus
from core.entry_scan import EntryScanner
from core.errors import NoBackupsFound, RepairBlocked, RepairFailed
from core.header_check import HeaderValidator
from core.modlist import MOD_OFFSET_ZERO, ModLedgerReader
from core.report import ProblemReport
from utils.i18n import translator as t
from utils.platform_utils import is_lock_held


class IntegrityOrchestrator:
    """Runs the check phases in order and collects a ProblemReport.

    Phases never stop the run on a problem found earlier; only the entry
    scan depends on a previous phase, since it needs the modlist sets.
    """

    def __init__(self, categories: Iterable[Category], game_dir: Path, backup_dir: Path, modlist_path: Path,
                 lock_check: Optional[Callable[[Path], bool]] = None, count_is_byte_length: bool = False,
                 workers: int = 1, verbose: bool = False, progress_callback=None):
        self.categories = list(categories)
        self.game_dir = Path(game_dir)
        self.backup_dir = Path(backup_dir)
        self.modlist_path = Path(modlist_path)
        self.workers = max(1, int(workers))
        self.verbose = verbose
        self.progress_callback = progress_callback

        self.headers = HeaderValidator(self.paths_for, lock_check or is_lock_held, verbose)
        self.ledger = ModLedgerReader(self.categories, verbose)
        self.scanner = EntryScanner(self.paths_for, count_is_byte_length, verbose)
        self.backups = BackupAuditor(self.backup_dir, self.paths_for, count_is_byte_length, verbose)

    @classmethod
    def from_config(cls, config, **kwargs) -> 'IntegrityOrchestrator':
        return cls(
            config.get_categories(),
            config.get_path('game_dir'),
            config.get_path('backup_dir'),
            config.get_path('modlist_path'),
            count_is_byte_length=bool(config.get('entry_count_is_byte_length', False)),
            workers=config.get('workers', 1),
            **kwargs
        )

    def paths_for(self, category: Category) -> CategoryPaths:
        return category_paths(category, self.game_dir, self.backup_dir)

    def _progress(self, operation: str, details: str):
        if self.progress_callback:
            self.progress_callback(operation, details)

    def _per_category(self, operation: str, func: Callable[[Category], List[FileCheck]]) -> List[FileCheck]:
        """Applies func to every category, in a thread pool when workers > 1.

        Results keep category order either way.
        """
        def run(category: Category) -> List[FileCheck]:
            result = func(category)
            self._progress(operation, category.key)
            return result

        if self.workers > 1 and len(self.categories) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(run, self.categories))
        else:
            results = [run(c) for c in self.categories]
        return [check for checks in results for check in checks]

    # --- Header phase ---

    def _check_headers(self) -> List[Category]:
        """Returns the categories whose header does not match."""
        mismatched = []
        for category in self.categories:
            result = self.headers.check(category)
            if result.problem:
                mismatched.append(category)
            self._progress(t.get('checking_header'), category.key)
        return mismatched

    def _header_checks(self) -> List[FileCheck]:
        return [check for c in self.categories for check in self.headers.check(c).files]

    def _repair(self, mismatched: List[Category]) -> RepairOutcome:
        try:
            written = self.headers.repair_all(mismatched)
        except RepairBlocked as e:
            print(f"[REPAIR] {e}", file=sys.stderr)
            return RepairOutcome(RepairStatus.BLOCKED, t.get('repair_blocked'), [])
        except RepairFailed as e:
            print(f"[REPAIR] {e}", file=sys.stderr)
            return RepairOutcome(RepairStatus.FAILED, t.get('repair_failed', e), [])

        still_wrong = [c.key for c in mismatched if self.headers.check(c).problem]
        if still_wrong:
            error = RepairFailed(f"header read-back still differs for {', '.join(still_wrong)}")
            print(f"[REPAIR] {error}", file=sys.stderr)
            return RepairOutcome(RepairStatus.FAILED, t.get('repair_failed', error), written)
        return RepairOutcome(RepairStatus.REPAIRED, t.get('repairs_complete'), written)

    def repair_headers(self) -> RepairOutcome:
        """Header repair on its own, for callers that ask the user first."""
        mismatched = self._check_headers()
        if not mismatched:
            return RepairOutcome(RepairStatus.NOT_NEEDED, t.get('repair_not_needed'), [])
        return self._repair(mismatched)

    def _header_phase(self, report: ProblemReport, auto_repair: bool):
        report.note(t.get('checking_header'))
        report.header = self._header_checks()
        mismatched = [c for c in self.categories
                      if any(f.is_problem for f in report.header if f.category == c.key)]
        if mismatched and auto_repair:
            report.note(t.get('header_errors_repairing'))
            report.repair_outcome = self._repair(mismatched)
            report.note(report.repair_outcome.message)
            report.header = self._header_checks()
        for category in self.categories:
            self._progress(t.get('checking_header'), category.key)
        report.header_mismatch = any(f.is_problem for f in report.header)

    # --- Modlist phase ---

    def _ledger_phase(self, report: ProblemReport) -> LedgerReconciliation:
        report.note(t.get('checking_modlist'))
        try:
            reconciliation = self.ledger.reconcile(self.modlist_path)
        except OSError as e:
            print(f"[MODLIST] Could not read {self.modlist_path}: {e}", file=sys.stderr)
            report.ledger_error = str(e)
            report.note(t.get('modlist_missing', self.modlist_path))
            reconciliation = LedgerReconciliation.empty()
        self._progress(t.get('checking_modlist'), self.modlist_path.name)

        report.ledger = reconciliation
        report.ledger_inconsistent = reconciliation.has_problems
        for note in reconciliation.notes:
            report.note(note)
        for finding in reconciliation.findings:
            if finding.reason == MOD_OFFSET_ZERO:
                report.note(t.get('mod_offset_zero', finding.entry.display_name))
        if reconciliation.has_problems:
            report.note(t.get('modlist_problem'))
        return reconciliation

    # --- Entry and backup phases ---

    def _entry_phase(self, report: ProblemReport, reconciliation: LedgerReconciliation):
        report.note(t.get('checking_index_values'))
        report.entries = self._per_category(
            t.get('checking_index_values'),
            lambda c: self.scanner.scan_category(c, reconciliation))
        report.suspect_entries = any(c.is_problem for c in report.entries)
        if report.suspect_entries:
            report.note(t.get('index_values_problem'))

    def _backup_phase(self, report: ProblemReport):
        report.note(t.get('checking_backups'))
        try:
            self.backups.ensure_backups_exist()
        except NoBackupsFound as e:
            print(f"[BACKUP] {e}", file=sys.stderr)
            report.no_backups_found = True
            report.note(t.get('no_backups'))
            return
        report.backups = self._per_category(t.get('checking_backups'), self.backups.audit_category)
        report.backup_corrupt = any(c.is_problem for c in report.backups)
        if report.backup_corrupt:
            report.note(t.get('backups_problem'))

    def run_full_check(self, auto_repair: bool = True) -> ProblemReport:
        """Runs every phase and returns the cumulative report."""
        report = ProblemReport()
        report.note(t.get('initializing'))

        self._header_phase(report, auto_repair)
        reconciliation = self._ledger_phase(report)
        self._entry_phase(report, reconciliation)
        self._backup_phase(report)

        if report.has_problems:
            report.note(t.get('problems_found'))
        elif report.files_unreadable:
            report.note(t.get('files_unreadable'))
        else:
            report.note(t.get('no_problems'))
        return report

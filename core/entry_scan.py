# core/entry_scan.py

"""Scanning live entry tables against the reconciled modlist."""
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from core.categories import Category, CategoryPaths
from core.data_structures import FileCheck, FileStatus, LedgerReconciliation
from core.index_codec import PRIMARY, SECONDARY, RecordLayout, decode_shard, iterate_entries

EntryRule = Callable[[int, int], Optional[str]]


def find_first_suspect(path: Path, layout: RecordLayout, rule: EntryRule,
                       count_is_byte_length: bool = False) -> Optional[Tuple[int, int, str]]:
    """Walks the entry table and stops at the first record the rule rejects.

    Returns:
        (record ordinal, packed offset field, reason) or None if every record passes
    """
    for ordinal, offset_field in enumerate(iterate_entries(path, layout, count_is_byte_length=count_is_byte_length)):
        reason = rule(offset_field, decode_shard(offset_field))
        if reason:
            return ordinal, offset_field, reason
    return None


def walk_file(category: Category, path: Path, layout: RecordLayout, rule: EntryRule,
              count_is_byte_length: bool = False, tag: str = 'SCAN', verbose: bool = False) -> FileCheck:
    """Runs one rule over one file and turns the outcome into a FileCheck."""
    try:
        suspect = find_first_suspect(path, layout, rule, count_is_byte_length)
    except OSError as e:
        print(f"[{tag}] Could not read {path}: {e}", file=sys.stderr)
        return FileCheck(category.key, path.name, FileStatus.UNKNOWN, str(e))

    if suspect is None:
        if verbose:
            print(f"[{tag}] {path.name}: ok", file=sys.stderr)
        return FileCheck(category.key, path.name, FileStatus.OK)

    ordinal, offset_field, reason = suspect
    detail = f"entry {ordinal}: offset field 0x{offset_field:08X} ({reason})"
    print(f"[{tag}] {path.name}: {detail}", file=sys.stderr)
    return FileCheck(category.key, path.name, FileStatus.PROBLEM, detail)


def live_entry_rule(category: Category, reconciliation: LedgerReconciliation) -> EntryRule:
    """Acceptance rule for entries of the live index files.

    Categories with a mod shard are judged by shard only; the zero offset
    check applies to the rest.
    """
    if category.has_shard_rule:
        def rule(offset_field: int, shard: int) -> Optional[str]:
            if shard > category.mod_shard:
                return f"shard {shard} beyond mod shard {category.mod_shard}"
            if shard == category.mod_shard and offset_field not in reconciliation.mod_offsets:
                return "mod shard entry unknown to the modlist"
            return None
    else:
        def rule(offset_field: int, shard: int) -> Optional[str]:
            if offset_field == 0:
                return "zero offset"
            return None
    return rule


class EntryScanner:
    """Checks every entry of a category's index files."""

    def __init__(self, paths_for: Callable[[Category], CategoryPaths],
                 count_is_byte_length: bool = False, verbose: bool = False):
        self.paths_for = paths_for
        self.count_is_byte_length = count_is_byte_length
        self.verbose = verbose

    def scan_file(self, category: Category, path: Path, layout: RecordLayout,
                  reconciliation: LedgerReconciliation) -> FileCheck:
        return walk_file(category, path, layout, live_entry_rule(category, reconciliation),
                         self.count_is_byte_length, 'SCAN', self.verbose)

    def scan_category(self, category: Category, reconciliation: LedgerReconciliation) -> List[FileCheck]:
        """Scans index and index2; the reconciliation must come from a finished modlist pass."""
        paths = self.paths_for(category)
        return [
            self.scan_file(category, paths.index, PRIMARY, reconciliation),
            self.scan_file(category, paths.index2, SECONDARY, reconciliation),
        ]

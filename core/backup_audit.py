# core/backup_audit.py

"""Checking that backup snapshots still hold the unmodified index state."""
from pathlib import Path
from typing import Callable, List, Optional

from core.categories import Category, CategoryPaths
from core.data_structures import FileCheck
from core.entry_scan import EntryRule, walk_file
from core.errors import NoBackupsFound
from core.index_codec import PRIMARY, SECONDARY


def backup_entry_rule(category: Category) -> EntryRule:
    """A backup entry must point into a shard the unmodified client ships."""
    if category.has_shard_rule:
        def rule(offset_field: int, shard: int) -> Optional[str]:
            if not category.original_shard_ok(shard):
                return f"shard {shard} is a mod shard"
            return None
    else:
        def rule(offset_field: int, shard: int) -> Optional[str]:
            if offset_field == 0:
                return "zero offset"
            return None
    return rule


class BackupAuditor:
    """Walks backup index files with the inverted acceptance rule."""

    def __init__(self, backup_dir: Path, paths_for: Callable[[Category], CategoryPaths],
                 count_is_byte_length: bool = False, verbose: bool = False):
        self.backup_dir = Path(backup_dir)
        self.paths_for = paths_for
        self.count_is_byte_length = count_is_byte_length
        self.verbose = verbose

    def ensure_backups_exist(self):
        """
        Raises:
            NoBackupsFound: if the backup directory is missing
        """
        if not self.backup_dir.is_dir():
            raise NoBackupsFound(self.backup_dir)

    def audit_category(self, category: Category) -> List[FileCheck]:
        paths = self.paths_for(category)
        rule = backup_entry_rule(category)
        return [
            walk_file(category, paths.backup_index, PRIMARY, rule, self.count_is_byte_length, 'BACKUP', self.verbose),
            walk_file(category, paths.backup_index2, SECONDARY, rule, self.count_is_byte_length, 'BACKUP', self.verbose),
        ]

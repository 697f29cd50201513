# core/header_check.py

"""Shard-count header validation and repair."""
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, List

from core.categories import Category, CategoryPaths
from core.data_structures import FileCheck, FileStatus, HeaderCheckResult
from core.errors import RepairBlocked, RepairFailed
from core.index_codec import read_shard_count, write_shard_count
from utils.platform_utils import is_lock_held, locked_paths


class HeaderValidator:
    """Compares the shard-count header of index and index2 with the expected value."""

    def __init__(self, paths_for: Callable[[Category], CategoryPaths],
                 lock_check: Callable[[Path], bool] = is_lock_held, verbose: bool = False):
        self.paths_for = paths_for
        self.lock_check = lock_check
        self.verbose = verbose

    def _targets(self, category: Category) -> List[Path]:
        paths = self.paths_for(category)
        return [paths.index, paths.index2]

    def check(self, category: Category) -> HeaderCheckResult:
        """Reads the shard count of both files; a mismatch on either is a problem."""
        files = []
        found: Dict[str, int] = {}
        for path in self._targets(category):
            try:
                value = read_shard_count(path)
            except OSError as e:
                print(f"[HEADER] Could not read {path}: {e}", file=sys.stderr)
                files.append(FileCheck(category.key, path.name, FileStatus.UNKNOWN, str(e)))
                continue

            found[path.name] = value
            if self.verbose:
                print(f"[HEADER] {path.name}: shard count {value}, expected {category.expected_shard_count}",
                      file=sys.stderr)
            if value != category.expected_shard_count:
                files.append(FileCheck(category.key, path.name, FileStatus.PROBLEM,
                                       f"shard count {value}, expected {category.expected_shard_count}"))
            else:
                files.append(FileCheck(category.key, path.name, FileStatus.OK))
        return HeaderCheckResult(category, files, found)

    def ensure_unlocked(self, categories: Iterable[Category]):
        """Queries the lock check for every file a repair would write.

        Raises:
            RepairBlocked: if any of them is held by another process
        """
        targets = [p for c in categories for p in self._targets(c)]
        held = locked_paths(targets, self.lock_check)
        if held:
            raise RepairBlocked(held)

    def _write(self, category: Category) -> List[Path]:
        written = []
        for path in self._targets(category):
            try:
                write_shard_count(path, category.expected_shard_count)
            except PermissionError as e:
                # The game grabbed the file between the lock check and the write
                raise RepairBlocked([path]) from e
            except OSError as e:
                raise RepairFailed(f"Could not write {path}: {e}", path) from e
            print(f"[REPAIR] {path.name}: shard count set to {category.expected_shard_count}", file=sys.stderr)
            written.append(path)
        return written

    def repair(self, category: Category) -> List[Path]:
        """Writes the expected shard count into both index files of a category.

        Returns:
            The files that were written.

        Raises:
            RepairBlocked: if the lock check reports a file in use
            RepairFailed: if a write fails for another reason
        """
        self.ensure_unlocked([category])
        return self._write(category)

    def repair_all(self, categories: Iterable[Category]) -> List[Path]:
        """Repairs several categories, checking every lock before the first write."""
        categories = list(categories)
        self.ensure_unlocked(categories)
        written = []
        for category in categories:
            written.extend(self._write(category))
        return written

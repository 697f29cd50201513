# core/modlist.py

"""Reading the modlist ledger and reconciling it into offset sets."""
import codecs
import json
import sys
from pathlib import Path
from typing import Dict, Iterable, Iterator, Optional, Tuple, Union

from core.categories import Category
from core.data_structures import LedgerFinding, LedgerReconciliation, ModLedgerEntry
from core.errors import LedgerParseError
from utils.i18n import translator as t

ORIGINAL_OFFSET_ZERO = 'original_offset_zero'
ORIGINAL_OFFSET_OUT_OF_RANGE = 'original_offset_out_of_range'
MOD_OFFSET_ZERO = 'mod_offset_zero'

REQUIRED_FIELDS = ('datFile', 'originalOffset', 'modOffset')


def parse_ledger_line(line: str, line_no: int) -> ModLedgerEntry:
    """Decodes one JSON line of the modlist.

    Raises:
        LedgerParseError: for invalid JSON, missing fields or non-integer offsets
    """
    try:
        raw = json.loads(line)
    except json.JSONDecodeError as e:
        raise LedgerParseError(line_no, f"invalid JSON ({e.msg})", line)
    if not isinstance(raw, dict):
        raise LedgerParseError(line_no, "expected a JSON object", line)

    missing = [f for f in REQUIRED_FIELDS if f not in raw]
    if missing:
        raise LedgerParseError(line_no, f"missing field(s): {', '.join(missing)}", line)

    offsets = []
    for field in ('originalOffset', 'modOffset'):
        value = raw[field]
        if isinstance(value, bool) or not isinstance(value, int):
            raise LedgerParseError(line_no, f"{field} is not an integer: {value!r}", line)
        offsets.append(value)

    name = raw.get('name')
    return ModLedgerEntry(
        name=None if name is None else str(name),
        full_path=str(raw.get('fullPath') or ''),
        dat_file=str(raw['datFile']),
        original_offset=offsets[0],
        mod_offset=offsets[1],
    )


def iter_ledger(path: Path) -> Iterator[Tuple[int, Union[ModLedgerEntry, LedgerParseError]]]:
    """Streams the modlist, yielding an entry or a parse error per non-empty line.

    Opening the file again on every call keeps the sequence restartable.
    Lines are decoded one at a time so a bad byte only costs its own line.
    """
    with Path(path).open('rb') as f:
        for line_no, raw in enumerate(f, start=1):
            if line_no == 1 and raw.startswith(codecs.BOM_UTF8):
                raw = raw[len(codecs.BOM_UTF8):]
            try:
                line = raw.decode('utf-8').strip()
            except UnicodeDecodeError as e:
                yield line_no, LedgerParseError(line_no, f"invalid UTF-8 at byte {e.start}",
                                                raw.decode('utf-8', errors='replace').strip())
                continue
            if not line:
                continue
            try:
                yield line_no, parse_ledger_line(line, line_no)
            except LedgerParseError as e:
                yield line_no, e


class ModLedgerReader:
    """Builds the reconciled offset sets the entry scan cross-references."""

    def __init__(self, categories: Iterable[Category], verbose: bool = False):
        self.categories: Dict[str, Category] = {c.key: c for c in categories}
        self.verbose = verbose

    def classify(self, entry: ModLedgerEntry) -> Optional[str]:
        """Returns the first rule an entry breaks, or None if it is healthy.

        Entries of categories that are not configured get the generic checks
        only, there is no shard range to hold them to.
        """
        category = self.categories.get(entry.dat_file)
        if entry.packed_original == 0:
            return ORIGINAL_OFFSET_ZERO
        if category is not None and category.has_shard_rule \
                and not category.original_shard_ok(entry.original_shard):
            return ORIGINAL_OFFSET_OUT_OF_RANGE
        if entry.packed_mod == 0:
            return MOD_OFFSET_ZERO
        return None

    def reconcile(self, path: Path) -> LedgerReconciliation:
        """Reads the whole modlist once and returns the reconciled sets.

        A missing file is an I/O error and is raised; an empty one yields an
        empty reconciliation with a note.
        """
        mod_offsets = set()
        original_offsets = set()
        findings = []
        parse_errors = []
        entries_read = 0
        unknown = set()

        for line_no, item in iter_ledger(path):
            if isinstance(item, LedgerParseError):
                print(f"[MODLIST] {item}", file=sys.stderr)
                parse_errors.append(item)
                continue

            # Disabled placeholder lines carry an empty name
            if item.name == '':
                continue
            entries_read += 1
            if item.dat_file not in self.categories:
                unknown.add(item.dat_file)

            reason = self.classify(item)
            if reason:
                findings.append(LedgerFinding(line_no, item, reason))
                print(f"[MODLIST] {item.display_name}: {reason}", file=sys.stderr)
            elif self.verbose:
                print(f"[MODLIST] {item.display_name}: ok", file=sys.stderr)

            original_offsets.add(item.packed_original)
            if item.packed_mod != 0:
                mod_offsets.add(item.packed_mod)

        notes = []
        if entries_read == 0 and not parse_errors:
            notes.append(t.get('no_modlist_entries'))
        if parse_errors:
            notes.append(t.get('modlist_parse_errors', len(parse_errors)))
        for key in sorted(unknown):
            notes.append(t.get('unknown_category', key))

        return LedgerReconciliation(
            has_problems=bool(findings),
            mod_offsets=frozenset(mod_offsets),
            original_offsets=frozenset(original_offsets),
            entries_read=entries_read,
            findings=findings,
            parse_errors=parse_errors,
            notes=notes,
        )

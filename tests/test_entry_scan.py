from core.categories import category_paths
from core.data_structures import FileStatus, LedgerReconciliation
from core.entry_scan import EntryScanner, find_first_suspect, live_entry_rule
from core.index_codec import PRIMARY, SECONDARY, encode_offset_field, write_index_file
from core.modlist import ModLedgerReader


def reconciled(mod_fields):
    return LedgerReconciliation(False, frozenset(mod_fields), frozenset(), len(mod_fields), [], [], [])


def scanner_for(tmp_path):
    return EntryScanner(lambda c: category_paths(c, tmp_path, tmp_path / 'backups'))


def test_consistent_install_has_no_suspects(install, categories, paths_for):
    reconciliation = ModLedgerReader(categories).reconcile(install.modlist_path)
    scanner = EntryScanner(paths_for)

    for category in categories:
        checks = scanner.scan_category(category, reconciliation)
        assert [c.status for c in checks] == [FileStatus.OK, FileStatus.OK]
        assert [c.file_label for c in checks] == [category.index_name, category.index2_name]


def test_orphaned_mod_shard_entry(tmp_path, items):
    known = encode_offset_field(0x80, 4)
    orphan = encode_offset_field(0x180, 4)
    fields = [encode_offset_field(0x800, 0), known, orphan, encode_offset_field(0x900, 1)]
    write_index_file(tmp_path / items.index_name, fields, PRIMARY, 5)

    check = scanner_for(tmp_path).scan_file(items, tmp_path / items.index_name, PRIMARY, reconciled({known}))

    assert check.status is FileStatus.PROBLEM
    assert check.detail.startswith('entry 2:')
    assert 'unknown to the modlist' in check.detail


def test_mod_shard_entries_need_the_reconciled_set(tmp_path, ui):
    modded = encode_offset_field(0x80, 1)
    write_index_file(tmp_path / ui.index2_name, [modded], SECONDARY, 2)
    scanner = scanner_for(tmp_path)

    assert scanner.scan_file(ui, tmp_path / ui.index2_name, SECONDARY, reconciled(set())).is_problem
    assert not scanner.scan_file(ui, tmp_path / ui.index2_name, SECONDARY, reconciled({modded})).is_problem


def test_shard_beyond_mod_shard(tmp_path, items):
    write_index_file(tmp_path / items.index_name, [encode_offset_field(0x80, 5)], PRIMARY, 5)
    check = scanner_for(tmp_path).scan_file(items, tmp_path / items.index_name, PRIMARY, reconciled(set()))

    assert check.is_problem
    assert 'beyond mod shard' in check.detail


def test_category_rule_takes_precedence_over_zero_rule(tmp_path, items):
    write_index_file(tmp_path / items.index_name, [0, encode_offset_field(0x800, 2)], PRIMARY, 5)
    check = scanner_for(tmp_path).scan_file(items, tmp_path / items.index_name, PRIMARY, reconciled(set()))
    assert check.status is FileStatus.OK


def test_generic_zero_offset_stops_at_first(tmp_path, generic):
    fields = [encode_offset_field(0x800, 0), 0, 0, encode_offset_field(0x80, 4)]
    write_index_file(tmp_path / generic.index_name, fields, PRIMARY, 1)

    assert find_first_suspect(tmp_path / generic.index_name, PRIMARY,
                              live_entry_rule(generic, reconciled(set()))) == (1, 0, 'zero offset')


def test_generic_category_ignores_shards(tmp_path, generic):
    write_index_file(tmp_path / generic.index_name, [encode_offset_field(0x80, 7)], PRIMARY, 1)
    check = scanner_for(tmp_path).scan_file(generic, tmp_path / generic.index_name, PRIMARY, reconciled(set()))
    assert check.status is FileStatus.OK


def test_missing_file_is_unknown(tmp_path, items):
    checks = scanner_for(tmp_path).scan_category(items, reconciled(set()))
    assert [c.status for c in checks] == [FileStatus.UNKNOWN, FileStatus.UNKNOWN]


def test_byte_length_entry_count(tmp_path, generic):
    fields = [encode_offset_field(0x800, 0)] * 4 + [0]
    write_index_file(tmp_path / generic.index2_name, fields, SECONDARY, 1, count_is_byte_length=True)
    scanner = EntryScanner(lambda c: category_paths(c, tmp_path, tmp_path), count_is_byte_length=True)

    check = scanner.scan_file(generic, tmp_path / generic.index2_name, SECONDARY, reconciled(set()))
    assert check.detail.startswith('entry 4:')

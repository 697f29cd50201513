import pytest

from conftest import set_header
from core.categories import CategoryKind, category_paths, make_category
from core.data_structures import FileStatus
from core.errors import RepairBlocked
from core.header_check import HeaderValidator
from core.index_codec import PRIMARY, SECONDARY, read_shard_count, write_index_file


def never_locked(path):
    return False


def always_locked(path):
    return True


def test_matching_headers_report_no_problem(categories, paths_for):
    validator = HeaderValidator(paths_for, never_locked)
    for category in categories:
        result = validator.check(category)
        assert not result.problem
        assert [f.status for f in result.files] == [FileStatus.OK, FileStatus.OK]


def test_mismatch_on_index2_alone_is_a_problem(items, paths_for):
    set_header(paths_for(items).index2, 4)
    result = HeaderValidator(paths_for, never_locked).check(items)

    assert result.problem
    assert [f.status for f in result.files] == [FileStatus.OK, FileStatus.PROBLEM]
    assert result.found[items.index2_name] == 4


def test_repair_converges(items, paths_for):
    paths = paths_for(items)
    set_header(paths.index, 3)
    set_header(paths.index2, 3)
    validator = HeaderValidator(paths_for, never_locked)
    assert validator.check(items).problem

    written = validator.repair(items)

    assert written == [paths.index, paths.index2]
    assert not validator.check(items).problem
    # Repairing a healthy header changes nothing
    validator.repair(items)
    assert not validator.check(items).problem


def test_repair_blocked_leaves_file_untouched(items, paths_for):
    paths = paths_for(items)
    set_header(paths.index, 3)
    before = paths.index.read_bytes()

    with pytest.raises(RepairBlocked) as info:
        HeaderValidator(paths_for, always_locked).repair(items)

    assert paths.index in info.value.locked_paths
    assert paths.index.read_bytes() == before
    assert read_shard_count(paths.index) == 3


def test_repair_all_checks_every_lock_before_writing(items, ui, paths_for):
    set_header(paths_for(items).index, 3)
    set_header(paths_for(ui).index, 7)
    ui_index2 = paths_for(ui).index2

    validator = HeaderValidator(paths_for, lambda p: p == ui_index2)
    with pytest.raises(RepairBlocked):
        validator.repair_all([items, ui])

    assert read_shard_count(paths_for(items).index) == 3
    assert read_shard_count(paths_for(ui).index) == 7


def test_lock_check_is_queried_per_target(items, paths_for):
    queried = []

    def lock_check(path):
        queried.append(path)
        return False

    HeaderValidator(paths_for, lock_check).repair(items)
    assert queried == [paths_for(items).index, paths_for(items).index2]


def test_unreadable_file_is_unknown(tmp_path, items):
    validator = HeaderValidator(lambda c: category_paths(c, tmp_path, tmp_path), never_locked)
    result = validator.check(items)

    assert [f.status for f in result.files] == [FileStatus.UNKNOWN, FileStatus.UNKNOWN]
    assert not result.problem


def test_items_scenario(tmp_path):
    category = make_category('items', CategoryKind.ITEMS)
    assert category.expected_shard_count == 5
    write_index_file(tmp_path / 'items.win32.index', [0x1000], PRIMARY, 3)
    write_index_file(tmp_path / 'items.win32.index2', [0x1000], SECONDARY, 3)
    validator = HeaderValidator(lambda c: category_paths(c, tmp_path, tmp_path), never_locked)

    assert validator.check(category).problem
    validator.repair(category)
    assert read_shard_count(tmp_path / 'items.win32.index') == 5
    assert not validator.check(category).problem

import struct
from pathlib import Path

import pytest

from core.categories import CategoryKind, category_paths, make_category
from core.index_codec import SHARD_COUNT_OFFSET
from core.sample_data import write_sample_install
from utils.i18n import translator


@pytest.fixture(autouse=True)
def english():
    translator.set_language('en')
    yield
    translator.set_language('en')


@pytest.fixture
def items():
    return make_category('040000', CategoryKind.ITEMS)


@pytest.fixture
def ui():
    return make_category('060000', CategoryKind.UI)


@pytest.fixture
def generic():
    return make_category('0a0000', CategoryKind.OTHER, expected_shard_count=1)


@pytest.fixture
def categories(items, ui, generic):
    return [items, ui, generic]


@pytest.fixture
def install(tmp_path, categories):
    return write_sample_install(tmp_path / 'install', categories, entries=24)


@pytest.fixture
def paths_for(install):
    return lambda category: category_paths(category, install.game_dir, install.backup_dir)


def poke_u16(path: Path, offset: int, value: int):
    with Path(path).open('r+b') as f:
        f.seek(offset)
        f.write(struct.pack('<H', value))


def set_header(path: Path, value: int):
    poke_u16(path, SHARD_COUNT_OFFSET, value)

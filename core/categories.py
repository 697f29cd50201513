# core/categories.py

"""Archive categories and the shard rules that come with each of them."""
from enum import Enum
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional


class CategoryKind(Enum):
    ITEMS = 'items'
    UI = 'ui'
    OTHER = 'other'


class Category(NamedTuple):
    """One archive family and the rule its entries are judged by.

    ``mod_shard`` is the extra shard the patcher redirects assets into and
    ``max_original_shard`` is the last shard the unmodified client ships.
    Categories without a mod shard are only checked for zeroed offsets.
    """
    key: str
    kind: CategoryKind
    expected_shard_count: int
    mod_shard: Optional[int] = None
    max_original_shard: Optional[int] = None

    @property
    def has_shard_rule(self) -> bool:
        return self.mod_shard is not None

    def original_shard_ok(self, shard: int) -> bool:
        if self.max_original_shard is None:
            return True
        return shard <= self.max_original_shard

    @property
    def index_name(self) -> str:
        return f"{self.key}.win32.index"

    @property
    def index2_name(self) -> str:
        return f"{self.key}.win32.index2"


class CategoryPaths(NamedTuple):
    """On-disk locations of a category's live and backup index files."""
    index: Path
    index2: Path
    backup_index: Path
    backup_index2: Path


ITEMS_KEY = '040000'
UI_KEY = '060000'

# Rules per kind. Shard counts come from the client's unmodified install
# plus the one extra shard created by the patcher.
KIND_DEFAULTS: Dict[CategoryKind, dict] = {
    CategoryKind.ITEMS: {'expected_shard_count': 5, 'mod_shard': 4, 'max_original_shard': 3},
    CategoryKind.UI: {'expected_shard_count': 2, 'mod_shard': 1, 'max_original_shard': 0},
    CategoryKind.OTHER: {'expected_shard_count': 1, 'mod_shard': None, 'max_original_shard': None},
}

DEFAULT_CATEGORIES = {
    ITEMS_KEY: {'kind': 'items'},
    UI_KEY: {'kind': 'ui'},
}


def make_category(key: str, kind: CategoryKind, **overrides) -> Category:
    """Builds a category from its kind's defaults, applying any overrides."""
    values = dict(KIND_DEFAULTS[kind])
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Category(key=key, kind=kind, **values)


def categories_from_config(raw: Dict[str, dict]) -> List[Category]:
    """Turns the ``categories`` config mapping into Category objects."""
    categories = []
    for key, settings in raw.items():
        settings = settings or {}
        try:
            kind = CategoryKind(str(settings.get('kind', 'other')).lower())
        except ValueError:
            raise ValueError(f"Unknown category kind for {key}: {settings.get('kind')}")
        categories.append(make_category(
            key, kind,
            expected_shard_count=settings.get('expected_shard_count'),
            mod_shard=settings.get('mod_shard'),
            max_original_shard=settings.get('max_original_shard'),
        ))
    return categories


def category_paths(category: Category, game_dir: Path, backup_dir: Path) -> CategoryPaths:
    """Resolves the four index files belonging to a category."""
    return CategoryPaths(
        index=game_dir / category.index_name,
        index2=game_dir / category.index2_name,
        backup_index=backup_dir / category.index_name,
        backup_index2=backup_dir / category.index2_name,
    )

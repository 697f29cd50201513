# core/sample_data.py

"""Writes a small synthetic install: live indexes, backups and a modlist."""
import json
from pathlib import Path
from typing import Iterable, List, NamedTuple

from core.categories import Category
from core.index_codec import PRIMARY, SECONDARY, encode_offset_field, write_index_file


class SampleInstall(NamedTuple):
    game_dir: Path
    backup_dir: Path
    modlist_path: Path


def original_fields(category: Category, count: int) -> List[int]:
    """Non-zero offset fields spread over the shards the unmodified client ships."""
    last_shard = category.max_original_shard or 0
    return [encode_offset_field(0x800 + i * 0x100, i % (last_shard + 1)) for i in range(count)]


def ledger_line(name: str, category: Category, original_field: int, mod_field: int) -> str:
    return json.dumps({
        'name': name,
        'category': 'Sample',
        'fullPath': f"chara/sample/{name}.tex",
        'datFile': category.key,
        'originalOffset': original_field * 8,
        'modOffset': mod_field * 8,
        'modSize': 0,
    })


def write_sample_install(root: Path, categories: Iterable[Category], entries: int = 32,
                         count_is_byte_length: bool = False) -> SampleInstall:
    """Builds a consistent install where the first entry of each sharded category is modded."""
    root = Path(root)
    install = SampleInstall(root / 'ffxiv', root / 'Index_Backups', root / 'TexTools.modlist')
    install.game_dir.mkdir(parents=True, exist_ok=True)
    install.backup_dir.mkdir(parents=True, exist_ok=True)

    lines = []
    for category in categories:
        backup = original_fields(category, entries)
        live = list(backup)
        if category.has_shard_rule and entries:
            live[0] = encode_offset_field(0x80, category.mod_shard)
            lines.append(ledger_line(f"{category.key}_mod0", category, backup[0], live[0]))

        for layout, live_name in ((PRIMARY, category.index_name), (SECONDARY, category.index2_name)):
            write_index_file(install.game_dir / live_name, live, layout,
                             category.expected_shard_count, count_is_byte_length)
            write_index_file(install.backup_dir / live_name, backup, layout,
                             category.expected_shard_count, count_is_byte_length)

    install.modlist_path.write_text(''.join(line + '\n' for line in lines), encoding='utf-8')
    return install

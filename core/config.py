# core/config.py

"""Configuration management."""
import json
import sys
from pathlib import Path
from typing import List, Optional

from core.categories import DEFAULT_CATEGORIES, Category, categories_from_config
from utils.platform_utils import get_platform_info


class Config:
    """Application configuration manager."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path.home() / '.index_doctor_config.json'
        game_dir = Path(get_platform_info()['game_dir'])
        self.default_config = {
            'language': None,
            'game_dir': str(game_dir),
            'backup_dir': str(Path.cwd() / 'Index_Backups'),
            'modlist_path': str(Path.cwd() / 'TexTools.modlist'),
            'categories': DEFAULT_CATEGORIES,
            'entry_count_is_byte_length': False,
            'auto_repair': True,
            'workers': 1,
        }
        self.config = self.load_config()

    def load_config(self) -> dict:
        """Load configuration from file, merged over the defaults."""
        config = json.loads(json.dumps(self.default_config))
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                config.update(loaded)
            except (OSError, json.JSONDecodeError) as e:
                print(f"[CONFIG] Ignoring unreadable config {self.config_file}: {e}", file=sys.stderr)
        return config

    def save_config(self):
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            print(f"[CONFIG] Could not save config {self.config_file}: {e}", file=sys.stderr)

    def get(self, key: str, default=None):
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value):
        """Set configuration value."""
        self.config[key] = value

    def get_path(self, key: str) -> Path:
        return Path(self.config[key]).expanduser()

    def get_categories(self) -> List[Category]:
        """Category objects for every configured archive family."""
        return categories_from_config(self.config.get('categories') or {})

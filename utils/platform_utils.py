# utils/platform_utils.py

"""Platform-specific utilities."""
import platform
from pathlib import Path, PureWindowsPath
from typing import Dict, Iterable, List


def get_platform_info() -> Dict:
    """Gets platform-specific defaults for locating the game install."""
    system = platform.system().lower()
    if system == 'windows':
        return {
            'name': 'Windows',
            'game_dir': PureWindowsPath(r'C:\Program Files (x86)\SquareEnix\FINAL FANTASY XIV - A Realm Reborn\game\sqpack\ffxiv'),
        }
    else:  # Unix-like (Linux, macOS) with the game under Wine
        return {
            'name': 'Unix-like',
            'game_dir': Path.home() / '.wine' / 'drive_c' / 'Program Files (x86)' / 'SquareEnix'
                        / 'FINAL FANTASY XIV - A Realm Reborn' / 'game' / 'sqpack' / 'ffxiv',
        }


def is_lock_held(path: Path) -> bool:
    """Checks whether another process keeps the file from being opened for writing.

    The game opens its index files without write sharing, so on Windows a
    read/write open fails with a sharing violation while it runs.
    """
    path = Path(path)
    if not path.exists():
        return False
    try:
        with path.open('r+b'):
            return False
    except PermissionError:
        return True


def locked_paths(paths: Iterable[Path], lock_check=is_lock_held) -> List[Path]:
    """Returns the subset of paths the lock check reports as held."""
    return [p for p in paths if lock_check(p)]

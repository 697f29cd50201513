import json

import pytest

from conftest import set_header
from core.index_codec import read_shard_count
from main import EXIT_OK, EXIT_PROBLEMS, EXIT_REPAIR, main


@pytest.fixture
def sample(tmp_path):
    target = tmp_path / 'sample'
    assert main(['--config', str(tmp_path / 'none.json'), '--lang', 'en', 'make-sample', str(target)]) == EXIT_OK
    return target


def base_args(tmp_path, sample):
    return [
        '--config', str(tmp_path / 'none.json'), '--lang', 'en',
        '--game-dir', str(sample / 'ffxiv'),
        '--backup-dir', str(sample / 'Index_Backups'),
        '--modlist', str(sample / 'TexTools.modlist'),
    ]


def test_check_clean_sample(tmp_path, sample, capsys):
    assert main(base_args(tmp_path, sample) + ['check']) == EXIT_OK
    out = capsys.readouterr().out
    assert '040000.win32.index' in out
    assert 'No problems found.' in out


def test_check_json(tmp_path, sample, capsys):
    assert main(base_args(tmp_path, sample) + ['check', '--output', 'json']) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data['has_problems'] is False
    assert len(data['entries']) == 4


def test_check_reports_problems(tmp_path, sample, capsys):
    (sample / 'TexTools.modlist').write_text('', encoding='utf-8')
    assert main(base_args(tmp_path, sample) + ['check', '--no-repair']) == EXIT_PROBLEMS


def test_repair_command(tmp_path, sample, capsys):
    index = sample / 'ffxiv' / '060000.win32.index'
    set_header(index, 1)

    assert main(base_args(tmp_path, sample) + ['repair', '--yes']) == EXIT_OK
    assert read_shard_count(index) == 2
    assert 'Repairs complete' in capsys.readouterr().out


def test_repair_can_be_declined(tmp_path, sample, monkeypatch, capsys):
    index = sample / 'ffxiv' / '060000.win32.index'
    set_header(index, 1)
    monkeypatch.setattr('builtins.input', lambda prompt: 'n')

    assert main(base_args(tmp_path, sample) + ['repair']) == EXIT_OK
    assert read_shard_count(index) == 1


def test_repair_blocked_exit_code(tmp_path, sample, monkeypatch):
    set_header(sample / 'ffxiv' / '040000.win32.index', 3)
    monkeypatch.setattr('core.orchestrator.is_lock_held', lambda path: True)

    assert main(base_args(tmp_path, sample) + ['check']) == EXIT_REPAIR


def test_modlist_json(tmp_path, sample, capsys):
    assert main(base_args(tmp_path, sample) + ['modlist', '--output', 'json']) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert data['entries_read'] == 2
    assert len(data['mod_offsets']) == 2


def test_config_file_categories(tmp_path, sample, capsys):
    config = tmp_path / 'config.json'
    config.write_text(json.dumps({'categories': {'040000': {'kind': 'items'}}}), encoding='utf-8')
    args = base_args(tmp_path, sample)
    args[1] = str(config)

    assert main(args + ['check', '--output', 'json']) == EXIT_OK
    data = json.loads(capsys.readouterr().out)
    assert {c['category'] for c in data['header']} == {'040000'}


def test_check_missing_game_dir_exits_nonzero(tmp_path, sample, capsys):
    args = base_args(tmp_path, sample)
    args[args.index('--game-dir') + 1] = str(tmp_path / 'no-such-dir')

    assert main(args + ['check']) == EXIT_PROBLEMS
    out = capsys.readouterr().out
    assert 'No problems found.' not in out
    assert 'could not be read' in out

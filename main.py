#!/usr/bin/env python3
"""
Index Doctor - Entry Point

Checks the .index/.index2 files of a modded game install for header damage,
modlist inconsistencies, unknown modded entries and corrupt backups, and
repairs the shard-count header when it has been reset.
"""

import argparse
import json
import sys
from pathlib import Path

from tqdm import tqdm

from core.config import Config
from core.data_structures import FileStatus, RepairStatus
from core.orchestrator import IntegrityOrchestrator
from core.sample_data import write_sample_install
from utils.i18n import translator as t

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_REPAIR = 2

MARKS = {
    FileStatus.OK: '\u2714',
    FileStatus.PROBLEM: '\u2716',
    FileStatus.UNKNOWN: '?',
}


def load_config(args) -> Config:
    """Builds the configuration, applying any path overrides from the command line."""
    config = Config(args.config)
    if args.game_dir:
        config.set('game_dir', str(args.game_dir))
    if args.backup_dir:
        config.set('backup_dir', str(args.backup_dir))
    if args.modlist:
        config.set('modlist_path', str(args.modlist))
    if args.byte_length_count:
        config.set('entry_count_is_byte_length', True)
    if args.workers:
        config.set('workers', args.workers)
    lang = args.lang or config.get('language')
    if lang:
        t.set_language(lang)
    return config


def make_progress_bar(total: int, enabled: bool):
    """Returns a tqdm bar and the progress callback feeding it."""
    bar = tqdm(total=total, unit='step', file=sys.stderr, disable=not enabled, leave=False)

    def callback(operation, details):
        bar.set_description(operation.rstrip('.'))
        bar.set_postfix_str(details)
        bar.update(1)

    return bar, callback


def print_checks(title: str, checks):
    print(title)
    for check in checks:
        line = f"\t{check.file_label:<24s}{MARKS[check.status]}"
        if check.detail:
            line += f"  {check.detail}"
        print(line)


def print_report(report):
    print_checks(t.get('checking_header'), report.header)
    if report.repair_outcome is not None:
        print(f"\t{report.repair_outcome.message}")

    print(t.get('checking_modlist'))
    if report.ledger is not None:
        for finding in report.ledger.findings:
            print(f"\t{finding.entry.display_name:<24s}{MARKS[FileStatus.PROBLEM]}  {finding.reason}")
        for error in report.ledger.parse_errors:
            print(f"\t{t.get('error', error)}")

    print_checks(t.get('checking_index_values'), report.entries)
    if report.no_backups_found:
        print(t.get('checking_backups'))
        print(f"\t{t.get('no_backups')}")
    else:
        print_checks(t.get('checking_backups'), report.backups)

    print()
    for message in report.diagnostics:
        print(message)


def run_check_cli(args) -> int:
    """Handles the 'check' command."""
    config = load_config(args)
    auto_repair = config.get('auto_repair', True) and not args.no_repair
    categories = config.get_categories()

    bar, callback = make_progress_bar(len(categories) * 3 + 1, args.output == 'text')
    orchestrator = IntegrityOrchestrator.from_config(config, verbose=args.verbose, progress_callback=callback)
    try:
        report = orchestrator.run_full_check(auto_repair=auto_repair)
    finally:
        bar.close()

    if args.output == 'json':
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)

    if report.repair_failed:
        return EXIT_REPAIR
    return EXIT_PROBLEMS if report.has_problems or report.files_unreadable else EXIT_OK


def run_repair_cli(args) -> int:
    """Handles the 'repair' command."""
    config = load_config(args)
    if not args.yes:
        answer = input(t.get('confirm_repair')).strip().lower()
        if answer not in ('y', 'yes', 'j', 'ja'):
            print(t.get('repair_cancelled'))
            return EXIT_OK

    orchestrator = IntegrityOrchestrator.from_config(config, verbose=args.verbose)
    outcome = orchestrator.repair_headers()
    if args.output == 'json':
        print(json.dumps(outcome.to_dict(), indent=2))
    else:
        print(outcome.message)
        for path in outcome.files_written:
            print(f"\t{path}")
    return EXIT_REPAIR if outcome.status in (RepairStatus.BLOCKED, RepairStatus.FAILED) else EXIT_OK


def run_modlist_cli(args) -> int:
    """Handles the 'modlist' command."""
    config = load_config(args)
    orchestrator = IntegrityOrchestrator.from_config(config, verbose=args.verbose)
    modlist_path = config.get_path('modlist_path')
    try:
        reconciliation = orchestrator.ledger.reconcile(modlist_path)
    except OSError as e:
        print(t.get('error', e), file=sys.stderr)
        return EXIT_PROBLEMS

    if args.output == 'json':
        print(json.dumps({
            'has_problems': reconciliation.has_problems,
            'entries_read': reconciliation.entries_read,
            'mod_offsets': sorted(reconciliation.mod_offsets),
            'original_offsets': sorted(reconciliation.original_offsets),
            'findings': [{'line': f.line_no, 'name': f.entry.display_name, 'reason': f.reason}
                         for f in reconciliation.findings],
            'parse_errors': [{'line': e.line_no, 'reason': e.reason} for e in reconciliation.parse_errors],
        }, indent=2))
    else:
        print(f"{reconciliation.entries_read} entries, {len(reconciliation.mod_offsets)} mod offsets")
        for finding in reconciliation.findings:
            print(f"\tline {finding.line_no}: {finding.entry.display_name} {MARKS[FileStatus.PROBLEM]} {finding.reason}")
        for note in reconciliation.notes:
            print(note)
        if reconciliation.has_problems:
            print(t.get('modlist_problem'))
    return EXIT_PROBLEMS if reconciliation.has_problems else EXIT_OK


def run_sample_cli(args) -> int:
    """Handles the 'make-sample' command."""
    config = load_config(args)
    install = write_sample_install(args.target, config.get_categories(), args.entries,
                                   bool(config.get('entry_count_is_byte_length')))
    print(t.get('sample_written', args.target))
    print(f"  --game-dir {install.game_dir} --backup-dir {install.backup_dir} --modlist {install.modlist_path}")
    return EXIT_OK


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Index Doctor: check and repair modded game index files.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="""
Examples:
  python main.py check --game-dir "C:/Games/ffxiv/game/sqpack/ffxiv"
    (Runs every check and repairs the headers if needed)

  python main.py check --no-repair --output json > report.json
    (Only reports, as JSON)

  python main.py repair --yes
    (Writes the expected shard counts without asking)
"""
    )
    parser.add_argument('--lang', choices=['en', 'de'], help='Set language for output')
    parser.add_argument('--config', type=Path, help='Path to a JSON config file')
    parser.add_argument('--game-dir', type=Path, help='Directory holding the live .index files')
    parser.add_argument('--backup-dir', type=Path, help='Directory holding the index backups')
    parser.add_argument('--modlist', type=Path, help='Path to the modlist file')
    parser.add_argument('--byte-length-count', action='store_true',
                        help='Read the entry count header as the entry table size in bytes')
    parser.add_argument('--workers', type=int, help='Threads used for per-category scans')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print per-file diagnostics')

    subparsers = parser.add_subparsers(dest='command', help='Available commands', required=True)

    # --- Check Command ---
    check_parser = subparsers.add_parser('check', help='Run every check')
    check_parser.add_argument('--no-repair', action='store_true', help='Do not repair mismatched headers')
    check_parser.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')

    # --- Repair Command ---
    repair_parser = subparsers.add_parser('repair', help='Repair the shard-count header only')
    repair_parser.add_argument('--yes', action='store_true', help='Do not ask for confirmation')
    repair_parser.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')

    # --- Modlist Command ---
    modlist_parser = subparsers.add_parser('modlist', help='Reconcile the modlist only')
    modlist_parser.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')

    # --- Sample Command ---
    sample_parser = subparsers.add_parser('make-sample', help='Write a synthetic install to try the checks on')
    sample_parser.add_argument('target', type=Path, help='Directory to write the sample into')
    sample_parser.add_argument('--entries', type=int, default=32, help='Entries per index file')

    args = parser.parse_args(argv)

    handlers = {
        'check': run_check_cli,
        'repair': run_repair_cli,
        'modlist': run_modlist_cli,
        'make-sample': run_sample_cli,
    }
    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        print("\nInterrupted by user.", file=sys.stderr)
        return EXIT_PROBLEMS
    except ValueError as e:
        print(t.get('error', e), file=sys.stderr)
        return EXIT_PROBLEMS


if __name__ == "__main__":
    sys.exit(main())

# utils/i18n.py

"""Internationalization support."""
import locale
from typing import Dict


class Translator:
    """Simple translation system for multilingual support."""

    def __init__(self):
        self.current_lang = 'en'
        self.translations: Dict[str, Dict[str, str]] = {
            'en': {
                'app_title': 'Index Doctor',
                'initializing': 'Initializing problem check....',

                # Header check and repair
                'checking_header': 'Checking index dat values....',
                'header_errors_repairing': 'Errors found, attempting to repair....',
                'repairs_complete': 'Repairs complete',
                'repair_blocked': 'Cannot run repairs with the game open. Please exit the game and run the check again.',
                'repair_failed': 'Repair did not take effect: {}',
                'repair_not_needed': 'Index headers already match, nothing to repair.',
                'confirm_repair': 'Write the expected shard counts into the index headers? [y/N] ',
                'repair_cancelled': 'Repair cancelled.',

                # Modlist
                'checking_modlist': 'Checking modlist....',
                'modlist_problem': 'The original offset is not valid and will cause issues when reverting, please start over from a clean index.',
                'mod_offset_zero': 'Mod offset for {} was 0, disable it from the modlist and reimport.',
                'no_modlist_entries': 'No entries found in modlist.',
                'modlist_missing': 'Modlist not found: {}',
                'modlist_parse_errors': '{} modlist line(s) could not be read.',
                'unknown_category': 'Modlist entries for unconfigured category {} were checked without a shard range.',

                # Entry scan and backups
                'checking_index_values': 'Checking index values....',
                'index_values_problem': 'There are modded entries in the index that are unknown to the modlist, please start over from a clean index.',
                'checking_backups': 'Checking index backups....',
                'backups_problem': 'Backup files are corrupt, request new backups.',
                'no_backups': 'No index backups found!',

                # Summary
                'no_problems': 'No problems found.',
                'problems_found': 'Problems found.',
                'files_unreadable': 'Some files could not be read, their state is unknown.',
                'error': 'Error: {}',
                'sample_written': 'Sample index files written to {}',
            },
            'de': {
                'app_title': 'Index Doctor',
                'initializing': 'Problemprüfung wird gestartet....',

                'checking_header': 'Prüfe Index-Dat-Werte....',
                'header_errors_repairing': 'Fehler gefunden, versuche Reparatur....',
                'repairs_complete': 'Reparatur abgeschlossen',
                'repair_blocked': 'Reparatur bei laufendem Spiel nicht möglich. Bitte das Spiel beenden und die Prüfung erneut starten.',
                'repair_failed': 'Reparatur hat nicht gegriffen: {}',
                'repair_not_needed': 'Index-Header sind korrekt, keine Reparatur nötig.',
                'confirm_repair': 'Erwartete Shard-Anzahl in die Index-Header schreiben? [j/N] ',
                'repair_cancelled': 'Reparatur abgebrochen.',

                'checking_modlist': 'Prüfe Modliste....',
                'modlist_problem': 'Der ursprüngliche Offset ist ungültig und verursacht Probleme beim Zurücksetzen, bitte mit einem sauberen Index neu beginnen.',
                'mod_offset_zero': 'Mod-Offset für {} war 0, bitte in der Modliste deaktivieren und neu importieren.',
                'no_modlist_entries': 'Keine Einträge in der Modliste gefunden.',
                'modlist_missing': 'Modliste nicht gefunden: {}',
                'modlist_parse_errors': '{} Zeile(n) der Modliste konnten nicht gelesen werden.',
                'unknown_category': 'Modlisten-Einträge der nicht konfigurierten Kategorie {} wurden ohne Shard-Bereich geprüft.',

                'checking_index_values': 'Prüfe Index-Werte....',
                'index_values_problem': 'Der Index enthält modifizierte Einträge, die der Modliste unbekannt sind, bitte mit einem sauberen Index neu beginnen.',
                'checking_backups': 'Prüfe Index-Sicherungen....',
                'backups_problem': 'Sicherungsdateien sind beschädigt, bitte neue Sicherungen anfordern.',
                'no_backups': 'Keine Index-Sicherungen gefunden!',

                'no_problems': 'Keine Probleme gefunden.',
                'problems_found': 'Probleme gefunden.',
                'files_unreadable': 'Einige Dateien konnten nicht gelesen werden, ihr Zustand ist unbekannt.',
                'error': 'Fehler: {}',
                'sample_written': 'Beispiel-Indexdateien geschrieben nach {}',
            }
        }

        # Auto-detect system language
        try:
            system_lang = locale.getlocale()[0]
            if system_lang and system_lang.lower().startswith('de'):
                self.current_lang = 'de'
        except ValueError:
            pass

    def set_language(self, lang_code: str):
        """Set the current language."""
        if lang_code in self.translations:
            self.current_lang = lang_code

    def get(self, key: str, *args) -> str:
        """Get translated string, with optional formatting."""
        text = self.translations[self.current_lang].get(key, key)
        if args:
            try:
                return text.format(*args)
            except (IndexError, KeyError):
                return text
        return text


# Global translator instance
translator = Translator()

import os
from dataclasses import dataclass, field
from typing import Optional, Set

from xliffgate.logger import get_logger
from xliffgate.query_builder import build_translate_query_string
from xliffgate.scan_result import ScanResult
from xliffgate.scanner import XliffScanner
from xliffgate.settings_manager import SettingsManager
from xliffgate.target_language import InsertionResult, add_missing_target_language_attribute

logger = get_logger(__name__)

XLIFF_EXTENSIONS = (".xlf", ".xliff")


def is_xliff_path(path: str) -> bool:
    return os.path.splitext(path or "")[1].lower() in XLIFF_EXTENSIONS


@dataclass
class GateDecision:
    file_path: str
    scan: ScanResult
    untranslated_states: Set[str] = field(default_factory=set)
    new_state: str = ""
    query_string: str = ""

    @property
    def needs_translation(self) -> bool:
        return self.scan.has_untranslated_units

    @property
    def missing_target_language(self) -> bool:
        return not self.scan.has_target_language_attribute


class TranslationGate:
    """
    Decides whether a file should be sent for translation and with which parameters.
    Keeps the scanner free of configuration: policies come from the SettingsManager.
    """
    def __init__(self, settings: SettingsManager, scanner: Optional[XliffScanner] = None):
        self.settings = settings
        self.scanner = scanner or XliffScanner()

    def inspect(self, file_path: str) -> GateDecision:
        """
        Scans file_path with the configured policies.
        Raises FileNotFoundError or MalformedDocumentError.
        """
        xliff12_states, xliff20_states = self.settings.policies
        result = self.scanner.scan_file(file_path, xliff12_states, xliff20_states)

        states = self.settings.untranslated_states_for(result.is_xliff2)
        new_state = self.settings.new_state_for(result.is_xliff2)
        decision = GateDecision(
            file_path=file_path,
            scan=result,
            untranslated_states=states,
            new_state=new_state,
            query_string=build_translate_query_string(states, new_state),
        )

        if decision.needs_translation:
            logger.info(f"{os.path.basename(file_path)} contains untranslated units (XLIFF {result.dialect})")
        if decision.missing_target_language:
            logger.warning(f"{os.path.basename(file_path)} has no target language declared")
        return decision

    def repair_target_language(self, decision: GateDecision) -> Optional[InsertionResult]:
        """Inserts the missing target-language attribute; no-op if the document already declares one."""
        if not decision.missing_target_language:
            return None
        return add_missing_target_language_attribute(decision.file_path, decision.scan.is_xliff2)

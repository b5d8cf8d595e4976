import os
import json
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ValidationError, field_validator

from .logger import get_logger
from .scan_result import (
    DEFAULT_XLIFF12_UNTRANSLATED_STATES,
    DEFAULT_XLIFF20_UNTRANSLATED_STATES,
    XLIFF12_STATES,
    XLIFF20_STATES,
)

logger = get_logger(__name__)

CONFIG_FILE = os.environ.get("XLIFFGATE_CONFIG", "config.json")


def _check_vocabulary(states: Set[str], allowed, dialect: str) -> Set[str]:
    unknown = sorted(s for s in states if s not in allowed)
    if unknown:
        raise ValueError(f"Unknown XLIFF {dialect} state(s): {', '.join(unknown)}")
    return states


class ScanSettings(BaseModel):
    """
    Untranslated-state policies and translate options, one set per XLIFF dialect.
    """
    xliff12_untranslated_states: Set[str] = set(DEFAULT_XLIFF12_UNTRANSLATED_STATES)
    xliff12_new_state: str = "translated"

    xliff20_untranslated_states: Set[str] = set(DEFAULT_XLIFF20_UNTRANSLATED_STATES)
    xliff20_new_state: str = "translated"

    show_reminder_toast: bool = True

    @field_validator("xliff12_untranslated_states")
    @classmethod
    def _xliff12_vocabulary(cls, v: Set[str]) -> Set[str]:
        return _check_vocabulary(v, XLIFF12_STATES, "1.2")

    @field_validator("xliff20_untranslated_states")
    @classmethod
    def _xliff20_vocabulary(cls, v: Set[str]) -> Set[str]:
        return _check_vocabulary(v, XLIFF20_STATES, "2.0")

    def to_json_dict(self) -> Dict:
        data = self.model_dump()
        # Sets are not JSON serializable, store sorted lists
        data["xliff12_untranslated_states"] = sorted(self.xliff12_untranslated_states)
        data["xliff20_untranslated_states"] = sorted(self.xliff20_untranslated_states)
        return data


class SettingsManager:
    """
    Loads and saves ScanSettings as JSON.
    A missing or broken config file falls back to the defaults.
    """
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or CONFIG_FILE
        self.settings = self._load_config()

    def _load_config(self) -> ScanSettings:
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    return ScanSettings.model_validate(json.load(f))
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.error(f"Failed to load config {self.config_path}: {e}. Using defaults.")
        return ScanSettings()

    def save_config(self):
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.settings.to_json_dict(), f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")

    def update(self, **changes) -> ScanSettings:
        """Validates and applies changes, then saves. Raises pydantic.ValidationError on bad values."""
        data = self.settings.model_dump()
        data.update(changes)
        self.settings = ScanSettings.model_validate(data)
        self.save_config()
        return self.settings

    def reset_to_defaults(self):
        self.settings = ScanSettings()
        self.save_config()

    def untranslated_states_for(self, is_xliff2: bool) -> Set[str]:
        if is_xliff2:
            return set(self.settings.xliff20_untranslated_states)
        return set(self.settings.xliff12_untranslated_states)

    def new_state_for(self, is_xliff2: bool) -> str:
        return self.settings.xliff20_new_state if is_xliff2 else self.settings.xliff12_new_state

    @property
    def policies(self) -> List[Set[str]]:
        """[xliff12_states, xliff20_states] in the order XliffScanner.scan takes them."""
        return [self.untranslated_states_for(False), self.untranslated_states_for(True)]

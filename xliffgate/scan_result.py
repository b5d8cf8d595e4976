from dataclasses import dataclass, asdict
from typing import Dict, FrozenSet

# Synthetic policy tokens, evaluated structurally rather than against a state attribute
EMPTY_TARGET = "no-state_empty-target"
TARGET_EQUALS_SOURCE = "no-state_target-equals-source"
SYNTHETIC_STATES = (TARGET_EQUALS_SOURCE, EMPTY_TARGET)

# Tokens a caller may put into an untranslated-state policy, per dialect
XLIFF12_STATES = (
    "new",
    "needs-translation",
    "needs-l10n",
    "needs-adaptation",
    "needs-review-translation",
    "needs-review-l10n",
    "needs-review-adaptation",
    "translated",
    "signed-off",
) + SYNTHETIC_STATES

XLIFF20_STATES = (
    "initial",
    "translated",
    "reviewed",
    "final",
) + SYNTHETIC_STATES

DEFAULT_XLIFF12_UNTRANSLATED_STATES: FrozenSet[str] = frozenset({
    "new",
    "needs-translation",
    "needs-l10n",
    "needs-adaptation",
    TARGET_EQUALS_SOURCE,
    EMPTY_TARGET,
})

DEFAULT_XLIFF20_UNTRANSLATED_STATES: FrozenSet[str] = frozenset({
    "initial",
    TARGET_EQUALS_SOURCE,
    EMPTY_TARGET,
})

# Element names a unit boundary can carry (1.2 trans-unit, 2.0 unit/segment)
UNIT_ELEMENTS = ("trans-unit", "unit", "segment")


def root_or_file_tag(is_xliff2: bool) -> str:
    """Element that carries the target-language declaration for the dialect."""
    return "xliff" if is_xliff2 else "file"


def target_language_attribute(is_xliff2: bool) -> str:
    return "trgLang" if is_xliff2 else "target-language"


@dataclass(frozen=True)
class ScanResult:
    """
    Verdict of a single scan over an XLIFF document.
    """
    has_untranslated_units: bool = False
    is_xliff2: bool = False  # version attribute starts with "2."
    has_target_language_attribute: bool = False

    @property
    def dialect(self) -> str:
        return "2.0" if self.is_xliff2 else "1.2"

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        data["dialect"] = self.dialect
        return data

from enum import Enum
from io import BytesIO
from typing import Iterable, List, Optional, Union
import os

from lxml import etree

from .logger import get_logger
from .scan_result import (
    EMPTY_TARGET,
    TARGET_EQUALS_SOURCE,
    UNIT_ELEMENTS,
    ScanResult,
)

logger = get_logger(__name__)


class MalformedDocumentError(ValueError):
    """Raised when the scanned input is not well-formed XML."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column

    @classmethod
    def from_syntax_error(cls, error: etree.XMLSyntaxError) -> "MalformedDocumentError":
        return cls(
            f"Malformed XLIFF document: {error}",
            line=getattr(error, "lineno", None),
            column=getattr(error, "offset", None),
        )


class CursorState(Enum):
    IDLE = "idle"
    IN_SOURCE = "in_source"
    IN_TARGET = "in_target"


def _local_name(elem) -> str:
    return etree.QName(elem).localname


def _collect_text(elem, parts: List[str]):
    """Appends the character data of elem and its descendants (comments skipped, their tails kept)."""
    if elem.text:
        parts.append(elem.text)
    for child in elem:
        if isinstance(child.tag, str):
            _collect_text(child, parts)
        if child.tail:
            parts.append(child.tail)


class ScanCursor:
    """
    Mutable state of one scan: the detected dialect, where the tokenizer currently is
    (outside, inside <source>, inside <target>) and the text of the current unit.

    A cursor lives for exactly one document; XliffScanner creates a new one per call.
    """

    def __init__(self, xliff12_states: Iterable[str], xliff20_states: Iterable[str]):
        self.xliff12_states = frozenset(xliff12_states or ())
        self.xliff20_states = frozenset(xliff20_states or ())

        self.state = CursorState.IDLE
        self.is_xliff2 = False
        self.dialect_resolved = False
        self.has_target_language = False
        self.has_untranslated_units = False

        self.source_text: List[str] = []
        self.target_text: List[str] = []

    @property
    def untranslated_states(self) -> frozenset:
        """Policy of the detected dialect, used by the structural target checks."""
        return self.xliff20_states if self.is_xliff2 else self.xliff12_states

    def mark_untranslated(self, reason: str):
        if not self.has_untranslated_units:
            logger.debug(f"Untranslated unit found ({reason})")
        self.has_untranslated_units = True

    def start(self, name: str, elem):
        if not self.dialect_resolved:
            # Root element decides the dialect once for the whole document
            self.dialect_resolved = True
            if name == "xliff":
                version = elem.get("version")
                self.is_xliff2 = bool(version) and version.startswith("2.")
                if self.is_xliff2 and elem.get("trgLang"):
                    self.has_target_language = True

        if name == "file":
            if not self.is_xliff2 and elem.get("target-language"):
                self.has_target_language = True

        elif name == "source":
            self.state = CursorState.IN_SOURCE
            self.source_text = []

        elif name == "target":
            self.state = CursorState.IN_TARGET
            self.target_text = []
            # Evaluated against the 1.2 policy in both dialects
            state = elem.get("state")
            if state is not None and state in self.xliff12_states:
                self.mark_untranslated(f"target state '{state}'")

        elif name in UNIT_ELEMENTS:
            self.source_text = []
            self.target_text = []
            if self.is_xliff2:
                state = elem.get("state")
                if state is not None and state in self.xliff20_states:
                    self.mark_untranslated(f"{name} state '{state}'")

    def end(self, name: str, elem):
        if name == "source":
            if self.state is CursorState.IN_SOURCE:
                _collect_text(elem, self.source_text)
                self.state = CursorState.IDLE

        elif name == "target":
            if self.state is CursorState.IN_TARGET:
                _collect_text(elem, self.target_text)
                self.state = CursorState.IDLE
            self._check_target()

        elif name in UNIT_ELEMENTS:
            # Unit fully processed, release its subtree
            elem.clear(keep_tail=True)
            while elem.getprevious() is not None:
                del elem.getparent()[0]

    def _check_target(self):
        target = "".join(self.target_text).strip()
        source = "".join(self.source_text).strip()
        policy = self.untranslated_states

        if not target and EMPTY_TARGET in policy:
            self.mark_untranslated("empty target")
        elif target == source and TARGET_EQUALS_SOURCE in policy:
            self.mark_untranslated("target equals source")

    def result(self) -> ScanResult:
        return ScanResult(
            has_untranslated_units=self.has_untranslated_units,
            is_xliff2=self.is_xliff2,
            has_target_language_attribute=self.has_target_language,
        )


class XliffScanner:
    """
    Single-pass scanner that decides whether an XLIFF 1.2 / 2.0 document still
    contains untranslated units under the caller's state policies.

    The scanner keeps no state between calls, one instance can be shared.
    """

    def scan(
        self,
        data: Union[bytes, str],
        xliff12_untranslated_states: Iterable[str],
        xliff20_untranslated_states: Iterable[str],
    ) -> ScanResult:
        """
        Scans an in-memory document.

        Args:
            data: Raw file bytes. A str is encoded as UTF-8 first.
            xliff12_untranslated_states: Policy tokens for XLIFF 1.2 documents.
            xliff20_untranslated_states: Policy tokens for XLIFF 2.0 documents.

        Returns:
            ScanResult for the document.

        Raises:
            MalformedDocumentError: if the input is not well-formed XML.
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        cursor = ScanCursor(xliff12_untranslated_states, xliff20_untranslated_states)
        events = etree.iterparse(
            BytesIO(data),
            events=("start", "end"),
            resolve_entities="internal",
            no_network=True,
            huge_tree=True,
        )
        try:
            for event, elem in events:
                if not isinstance(elem.tag, str):
                    continue
                if event == "start":
                    cursor.start(_local_name(elem), elem)
                else:
                    cursor.end(_local_name(elem), elem)
        except etree.XMLSyntaxError as e:
            logger.warning(f"Scan aborted, document is not well-formed: {e}")
            raise MalformedDocumentError.from_syntax_error(e) from e

        result = cursor.result()
        logger.debug(
            f"Scan finished: dialect={result.dialect}, "
            f"untranslated={result.has_untranslated_units}, "
            f"target_language={result.has_target_language_attribute}"
        )
        return result

    def scan_file(
        self,
        file_path: str,
        xliff12_untranslated_states: Iterable[str],
        xliff20_untranslated_states: Iterable[str],
    ) -> ScanResult:
        """Reads file_path and scans its bytes."""
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"File not found: {file_path}")

        with open(file_path, "rb") as f:
            data = f.read()
        logger.debug(f"Scanning {file_path} ({len(data)} bytes)")
        return self.scan(data, xliff12_untranslated_states, xliff20_untranslated_states)

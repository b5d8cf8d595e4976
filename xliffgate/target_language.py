import os
import re
from dataclasses import dataclass
from typing import Optional

from .logger import get_logger
from .scan_result import root_or_file_tag, target_language_attribute

logger = get_logger(__name__)

# Lax locale token: language letters, optional alphanumeric region/variant
LANGUAGE_CANDIDATE_PATTERN = re.compile(r"^[A-Za-z]{2,8}(?:-[A-Za-z0-9]{2,8})?$")

# Primary language subtags in practice are ISO 639 codes
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[A-Za-z]{2,3}$")

LOCALE_DELIMITERS = (".", "_", "-")


@dataclass
class InsertionResult:
    patched_text: str
    caret_offset: int  # Offset just inside the opening quote of the new value
    attribute_value: str = ""


def _last_delimiter(text: str) -> int:
    return max(text.rfind(d) for d in LOCALE_DELIMITERS)


def normalize_locale(candidate: str) -> Optional[str]:
    """Normalizes "en_us" / "EN-us" to "en-US"; None if the token does not look like a locale."""
    if not candidate:
        return None

    normalized = candidate.replace("_", "-").strip()
    if not LANGUAGE_CANDIDATE_PATTERN.match(normalized):
        return None

    parts = [p for p in normalized.split("-") if p.strip()]
    if not parts or not LANGUAGE_SUBTAG_PATTERN.match(parts[0]):
        return None

    lang = parts[0].lower()
    region = "-".join(p.upper() for p in parts[1:])
    return f"{lang}-{region}" if region else lang


def guess_language_from_filename(filename: str) -> Optional[str]:
    """
    Guesses a locale tag from the end of a file name.

    "messages.fr.xlf" -> "fr", "labels_en_us.xlf" -> "en-US", "app-pt-br.xlf" -> "pt-BR",
    "strings.xlf" -> None.
    Only the syntax is normalized, the tag is not checked against a registry.
    """
    filename = os.path.basename(filename or "")
    base_name = filename.rsplit(".", 1)[0] if "." in filename else filename

    idx = _last_delimiter(base_name)
    if idx == -1:
        return normalize_locale(base_name)

    last = base_name[idx + 1:]
    # "_us" / "-br" may be the region of a "lang_region" pair when a name precedes the pair,
    # "." always starts a new token
    head = base_name[:idx]
    head_idx = _last_delimiter(head)
    if base_name[idx] != "." and head_idx != -1:
        pair = f"{head[head_idx + 1:]}-{last}"
        guess = normalize_locale(pair)
        if guess:
            return guess

    return normalize_locale(last)


def find_insertion_offset(text: str, tag_name: str) -> Optional[int]:
    """
    Returns the offset where a new attribute can be spliced into the first <tag_name ...> start tag:
    right before '>' or, for a self-closing tag, right before '/'.
    """
    match = re.search(rf"<\s*{re.escape(tag_name)}\b", text, re.IGNORECASE)
    if not match:
        return None

    close_idx = text.find(">", match.end())
    if close_idx == -1:
        return None

    insert_offset = close_idx
    search_idx = close_idx - 1
    while search_idx > match.start() and text[search_idx].isspace():
        search_idx -= 1
    if search_idx > match.start() and text[search_idx] == "/":
        insert_offset = search_idx
    return insert_offset


def build_attribute(name: str, value: str) -> str:
    return f' {name}="{value}"'


def insert_target_language_attribute(text: str, is_xliff2: bool, filename: str = "") -> Optional[InsertionResult]:
    """
    Splices the dialect's target-language attribute into the document text.

    The value is guessed from filename (empty when nothing plausible is found).
    Returns None when the <file> (1.2) or <xliff> (2.0) start tag cannot be located.
    """
    tag_name = root_or_file_tag(is_xliff2)
    insert_offset = find_insertion_offset(text, tag_name)
    if insert_offset is None:
        return None

    value = guess_language_from_filename(filename) or ""
    attribute_text = build_attribute(target_language_attribute(is_xliff2), value)

    patched = text[:insert_offset] + attribute_text + text[insert_offset:]
    caret_offset = insert_offset + attribute_text.index('"') + 1
    return InsertionResult(patched_text=patched, caret_offset=caret_offset, attribute_value=value)


def add_missing_target_language_attribute(file_path: str, is_xliff2: bool) -> Optional[InsertionResult]:
    """
    Inserts the missing target-language attribute into the file on disk.

    Returns the InsertionResult, or None if the file has no tag to patch.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(file_path, "r", encoding="utf-8", newline="") as f:
        text = f.read()

    result = insert_target_language_attribute(text, is_xliff2, os.path.basename(file_path))
    if result is None:
        logger.warning(f"No <{root_or_file_tag(is_xliff2)}> tag found in {file_path}, nothing inserted")
        return None

    with open(file_path, "w", encoding="utf-8", newline="") as f:
        f.write(result.patched_text)

    attr = target_language_attribute(is_xliff2)
    logger.info(f"Inserted {attr}=\"{result.attribute_value}\" into {file_path} at offset {result.caret_offset}")
    return result

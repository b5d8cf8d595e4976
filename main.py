import argparse
import json
import os
import sys
from xliffgate.logger import setup_exception_hook
from xliffgate.scanner import MalformedDocumentError
from xliffgate.services.translation_gate import TranslationGate, is_xliff_path
from xliffgate.settings_manager import SettingsManager

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNTRANSLATED = 2


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Check XLIFF files for untranslated units")
    parser.add_argument("input_file", help="Path to input .xlf/.xliff file")
    parser.add_argument("--config", help="Path to JSON settings file")
    parser.add_argument("--fix-target-language", action="store_true",
                        help="Insert a guessed target language attribute if the file has none")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    args = parser.parse_args(argv)

    input_path = args.input_file
    if not os.path.exists(input_path):
        print(f"Error: File not found: {input_path}")
        return EXIT_ERROR
    if not is_xliff_path(input_path):
        print(f"Error: Not an XLIFF file (.xlf/.xliff): {input_path}")
        return EXIT_ERROR

    gate = TranslationGate(SettingsManager(args.config))
    try:
        decision = gate.inspect(input_path)
    except MalformedDocumentError as e:
        print(f"Error: {e}")
        return EXIT_ERROR

    inserted = None
    if args.fix_target_language and decision.missing_target_language:
        inserted = gate.repair_target_language(decision)

    if args.json:
        payload = decision.scan.to_dict()
        payload["query_string"] = decision.query_string
        if inserted is not None:
            payload["inserted_target_language"] = inserted.attribute_value
            payload["caret_offset"] = inserted.caret_offset
        print(json.dumps(payload, indent=2))
    else:
        print(f"File: {input_path} (XLIFF {decision.scan.dialect})")
        print(f"Untranslated units: {'yes' if decision.needs_translation else 'no'}")
        print(f"Target language declared: {'yes' if not decision.missing_target_language else 'no'}")
        if decision.needs_translation:
            print(f"Translate query: {decision.query_string}")
        if inserted is not None:
            print(f"Inserted target language \"{inserted.attribute_value}\" (caret at offset {inserted.caret_offset})")
        elif args.fix_target_language and decision.missing_target_language:
            print("Could not find a tag to insert the target language into.")
        if decision.needs_translation and gate.settings.settings.show_reminder_toast:
            print(f"Reminder: '{os.path.basename(input_path)}' contains untranslated strings. "
                  "Set show_reminder_toast to false in the config to hide this.")

    return EXIT_UNTRANSLATED if decision.needs_translation else EXIT_OK


if __name__ == "__main__":
    setup_exception_hook()
    sys.exit(main())

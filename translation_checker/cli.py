"""
Command line entry point: check, fix and translate gettext ``.po`` files.

    check-translation [--fix] [--translate [--interactive]] [--retranslate-glossary] FILE...
"""
import argparse
import logging
import os
import re
import shutil
import sys
from typing import Dict, List, Mapping, Optional, Sequence

from tqdm import tqdm

from translation_checker.app_config import AppConfig, configure_logging, load_app_config
from translation_checker.catalog_checker import CatalogChecker, CheckReport
from translation_checker.exceptions import (
    CatalogError,
    EngineError,
    GlossaryError,
    InteractionError
)
from translation_checker.glossary_store import GlossaryMapping, load_glossary
from translation_checker.translation_engines import SUPPORTED_ENGINES, TranslationEngine, create_engine
from translation_checker.translator import Translator, language_code_to_name
from translation_checker.typography_rules import TypographyRuleSet, get_rule_set

logger = logging.getLogger(__name__)

_LANGUAGE_IN_FILENAME = re.compile(r'(?:^|[-_.])(?P<code>[a-z]{2,3})(?:[_-][A-Z]{2})?\.pot?$')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="check-translation",
        usage="%(prog)s [options] FILE [FILE ...]",
        description="Check typography and glossary usage in gettext .po files, "
                    "optionally fixing them and filling missing translations with an AI engine.",
    )
    parser.add_argument("files", nargs="+", metavar="FILE", help="Path to a .po file")
    parser.add_argument("--fix", action="store_true",
                        help="Apply typography fixes and glossary annotations (a .bak backup is kept)")
    parser.add_argument("--translate", action="store_true",
                        help="Translate empty entries with the configured engine and save them (a .bak backup is kept)")
    parser.add_argument("--interactive", action="store_true",
                        help="Review each suggested translation before it is applied")
    parser.add_argument("--retranslate-glossary", action="store_true",
                        help="Retranslate only entries with glossary-review comments (implies --translate and --fix)")
    parser.add_argument("--engine", default=None,
                        help=f"Translation engine: {', '.join(SUPPORTED_ENGINES)} (default from configuration)")
    parser.add_argument("--model", default=None, help="Model name passed to the engine")
    parser.add_argument("--lang", default=None,
                        help="Target language code; detected from the file name when omitted")
    parser.add_argument("--config", default=None, help="Path to a YAML configuration file")
    parser.add_argument("--quiet", action="store_true", help="Only print errors and warnings")
    parser.add_argument("--no-warnings", action="store_true", help="Do not print glossary warnings")
    return parser


def detect_language(file_path: str, language_codes: Mapping[str, str], default: str) -> str:
    """
    Guess the target language from a file name such as ``plugin-es.po`` or ``fr_FR.po``.

    Args:
        file_path: The catalog path.
        language_codes: Known language codes.
        default: Returned when the name carries no known language code.

    Returns:
        str: The language code.
    """
    match = _LANGUAGE_IN_FILENAME.search(os.path.basename(file_path))
    if match and match.group('code') in language_codes:
        return match.group('code')
    return default


def _enabled_rule_sets(config: AppConfig) -> Dict[str, TypographyRuleSet]:
    rule_sets = {}
    for code in config.rule_languages:
        rule_set = get_rule_set(code)
        if rule_set is None:
            logger.warning("No typography rules available for '%s'; skipping it.", code)
            continue
        rule_sets[code] = rule_set
    return rule_sets


def print_report(file_path: str, report: CheckReport, show_warnings: bool) -> None:
    for error in report.errors:
        print(f"ERROR: {error}")
    if show_warnings:
        for warning in report.warnings:
            print(f"WARNING: {warning}")
    logger.info("%s: %d error(s), %d warning(s).", file_path, len(report.errors), len(report.warnings))


def write_fixed_content(file_path: str, original_content: str, fixed_content: str, fixing: bool = True) -> None:
    """Back up the original next to the file and write the new content."""
    if fixed_content == original_content:
        logger.info("Nothing to fix in %s", file_path)
        return
    if fixing:
        logger.info("Fixing %s", file_path)
    else:
        logger.info("Saving translations to %s", file_path)
    shutil.copy2(file_path, file_path + '.bak')
    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(fixed_content)


def run_checks(args: argparse.Namespace, config: AppConfig, engine: Optional[TranslationEngine]) -> int:
    """Check every file named on the command line; returns the exit code."""
    translator = Translator(engine=engine, interactive=args.interactive, language_names=config.language_codes)
    rule_sets = _enabled_rule_sets(config)
    glossaries: Dict[str, GlossaryMapping] = {}

    translate = args.translate
    retranslate_glossary = args.retranslate_glossary
    has_errors = False

    files: Sequence[str] = args.files
    show_progress = len(files) > 1 and not args.interactive and not args.quiet
    for file_path in tqdm(files, desc="Checking", unit="file", disable=not show_progress):
        if not os.path.isfile(file_path):
            print(f"File not found: {file_path}", file=sys.stderr)
            has_errors = True
            continue
        if (args.fix or translate) and not os.access(file_path, os.W_OK):
            print(f"Cannot write to file: {file_path}", file=sys.stderr)
            has_errors = True
            continue

        target_lang = args.lang or detect_language(file_path, config.language_codes, config.default_language)
        logger.info("Checking %s", file_path)
        logger.info("Language: %s", language_code_to_name(target_lang, config.language_codes))

        if target_lang not in glossaries:
            glossaries[target_lang] = load_glossary(target_lang, config.glossary_dir)

        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        checker = CatalogChecker(translator=translator, glossary=glossaries[target_lang], rule_sets=rule_sets)
        try:
            report = checker.check(
                content,
                fix=args.fix,
                translate=translate,
                target_lang=target_lang,
                retranslate_glossary_only=retranslate_glossary
            )
        except CatalogError as exc:
            print(f"ERROR: {file_path}: {exc}")
            has_errors = True
            continue

        print_report(file_path, report, show_warnings=not args.no_warnings)
        if report.errors:
            has_errors = True
        if report.translated:
            logger.info("Translated %d entr%s in %s", report.translated,
                        "y" if report.translated == 1 else "ies", file_path)

        if report.fixed_content is not None:
            write_fixed_content(file_path, content, report.fixed_content, fixing=args.fix)

        if report.halted:
            logger.info("Translation stopped; remaining files are only checked.")
            translate = False
            retranslate_glossary = False

    return 1 if has_errors else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.retranslate_glossary:
        args.translate = True
        args.fix = True

    config = load_app_config(args.config)
    configure_logging(config, quiet=args.quiet)

    engine = None
    if args.translate:
        try:
            engine = create_engine(config, name=args.engine, model=args.model)
        except EngineError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    try:
        return run_checks(args, config, engine)
    except GlossaryError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except InteractionError as exc:
        print(f"Error: {exc}. Aborting.", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

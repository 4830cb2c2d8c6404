import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from translation_checker import catalog as catalog_io
from translation_checker.catalog import CatalogEntry
from translation_checker.glossary_checker import glossary_check
from translation_checker.glossary_store import GlossaryMapping
from translation_checker.translator import STOP_FLAG, Translator
from translation_checker.typography_rules import RULE_SETS, TypographyRuleSet, process_string

logger = logging.getLogger(__name__)


@dataclass
class CheckReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    fixed_content: Optional[str] = None
    translated: int = 0
    halted: bool = False


def _unique(messages: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(messages))


class CatalogChecker:
    """
    Runs translation, typography and glossary checks over every entry of a
    catalog and collects the diagnostics into a single report.
    """

    def __init__(
            self,
            translator: Optional[Translator] = None,
            glossary: Optional[GlossaryMapping] = None,
            rule_sets: Optional[Mapping[str, TypographyRuleSet]] = None
    ):
        self.translator = translator or Translator()
        self.glossary = glossary
        self.rule_sets = RULE_SETS if rule_sets is None else rule_sets

    def check(
            self,
            content: str,
            fix: bool = False,
            translate: bool = False,
            target_lang: str = 'fr',
            retranslate_glossary_only: bool = False
    ) -> CheckReport:
        """
        Check (and optionally translate and fix) a PO catalog.

        Args:
            content: The catalog text.
            fix: Apply typography fixes and glossary annotations, and return the new content.
                Without it, the new content is still returned when entries were translated,
                carrying the translations only.
            translate: Ask the translator for entries with an empty translation.
            target_lang: The target language code.
            retranslate_glossary_only: Only retranslate entries carrying a
                glossary-review comment; every other entry skips translation.

        Returns:
            CheckReport: Deduplicated errors and warnings, and the content to write back
            when ``fix`` is set or something was translated.

        Raises:
            CatalogError: If the content cannot be parsed.
            InteractionError: If the interactive reviewer cannot be read from.
        """
        parsed = catalog_io.load(content)
        report = CheckReport()
        errors: List[str] = []
        warnings: List[str] = []
        rule_set = self.rule_sets.get(target_lang)

        for entry in parsed.entries():
            if self._should_translate(entry, translate, retranslate_glossary_only, report.halted):
                self._translate_entry(entry, target_lang, retranslate_glossary_only, report)

            if not entry.translation or rule_set is None:
                continue

            result = process_string(entry.translation, entry.original, rule_set)
            errors.extend(result.errors)

            glossary_comments: List[str] = []
            if self.glossary is not None and self.glossary.applies_to(target_lang):
                glossary_result = glossary_check(entry.original, entry.translation, self.glossary, rule_set)
                warnings.extend(glossary_result.warnings)
                glossary_comments = glossary_result.comments

            if fix:
                if result.has_errors:
                    entry.translation = result.fixed_text
                for comment in glossary_comments:
                    entry.add_comment(comment)

        report.errors = _unique(errors)
        report.warnings = _unique(warnings)
        if fix or report.translated:
            report.fixed_content = catalog_io.serialize(parsed)
        return report

    def _should_translate(
            self,
            entry: CatalogEntry,
            translate: bool,
            retranslate_glossary_only: bool,
            halted: bool
    ) -> bool:
        if halted:
            return False
        if retranslate_glossary_only:
            return entry.has_glossary_review()
        return translate and not entry.translation

    def _translate_entry(
            self,
            entry: CatalogEntry,
            target_lang: str,
            retranslating: bool,
            report: CheckReport
    ) -> None:
        outcome = self.translator.translate(entry.original, target_lang, self.glossary)
        if outcome is None:
            return

        if outcome.flag == STOP_FLAG:
            logger.info("Translation stopped by reviewer; remaining entries will not be translated.")
            report.halted = True
            return

        if not outcome.text:
            return

        entry.translation = outcome.text
        if outcome.flag:
            entry.add_flag(outcome.flag)
        if retranslating:
            entry.clear_glossary_reviews()
        report.translated += 1
        logger.debug("Translated '%s' -> '%s'", entry.original, outcome.text)

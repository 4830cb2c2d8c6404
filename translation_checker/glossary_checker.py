from dataclasses import dataclass, field
from typing import List

from translation_checker.catalog import GlossaryReviewComment
from translation_checker.glossary_store import GlossaryMapping, term_occurs
from translation_checker.typography_rules import FRENCH_RULES, TypographyRuleSet


@dataclass
class GlossaryResult:
    warnings: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)


def glossary_check(
    original: str,
    translated: str,
    glossary: GlossaryMapping,
    rule_set: TypographyRuleSet = FRENCH_RULES
) -> GlossaryResult:
    """
    Flag glossary terms of the source string whose preferred rendering is
    missing from the translation.

    A term is looked up as a case-insensitive whole word in ``original``; it
    is satisfied when any of its renderings is a case-insensitive substring
    of ``translated``.

    Args:
        original: The source string.
        translated: The translated string.
        glossary: The glossary for the target language.
        rule_set: Supplies the warning wording and the renderings joiner.

    Returns:
        GlossaryResult: One warning and one ``glossary-review`` comment per unsatisfied term.
    """
    result = GlossaryResult()
    translated_lower = translated.lower()

    for term, renderings in glossary.items():
        if not term_occurs(term, original):
            continue
        if any(rendering.lower() in translated_lower for rendering in renderings):
            continue

        joined = rule_set.renderings_joiner.join(renderings)
        result.warnings.append(
            rule_set.message("glossary", term=term, renderings=joined, text=translated)
        )
        result.comments.append(GlossaryReviewComment(term=term, renderings=joined).render())

    return result

"""
Typography rules for translated strings.

A rule set describes the conventions of one target language; ``process_string``
runs the ordered rules over a single translated string and returns every
violation found together with the rewritten text. Nothing here performs I/O.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

NBSP = "\u00a0"
ELLIPSIS = "…"

# printf-style placeholders are not literal percent signs
_PERCENT_TOKEN = re.compile(
    r'(?P<space>\s*)(?P<token>%%|%(?:\(\w+\))?(?:\d+\$)?[-+#0]*\d*(?:\.\d+)?[sdifuxXeEgGcr]|%)'
)
_ETC_ELLIPSIS = re.compile(r'\b(etc)(?:\.*' + ELLIPSIS + r'[.' + ELLIPSIS + r']*|\.{2,})', re.IGNORECASE)
_STRAIGHT_QUOTED = re.compile(r'"\s*([^"]+?)\s*"')
_URL = re.compile(r'\b[a-z][a-z0-9+.-]*://\S+', re.IGNORECASE)


@dataclass(frozen=True)
class TypographyRuleSet:
    """Typographic conventions of one target language."""
    language: str
    nbsp_punctuation: Tuple[str, ...]
    opening_quote: str
    closing_quote: str
    apostrophe: str
    renderings_joiner: str
    messages: Mapping[str, str] = field(default_factory=dict)

    def message(self, key: str, **values: str) -> str:
        return self.messages[key].format(**values)


FRENCH_RULES = TypographyRuleSet(
    language="fr",
    nbsp_punctuation=("!", "?", ":", ";", "»"),
    opening_quote="«",
    closing_quote="»",
    apostrophe="’",
    renderings_joiner=" ou ",
    messages={
        "nbsp_before": "Espace insécable manquant avant '{mark}' : {text} (source : {original})",
        "straight_quotes": "Utiliser les guillemets français « » au lieu des guillemets droits : {text} (source : {original})",
        "apostrophe": "Utiliser l'apostrophe typographique (’) au lieu de l'apostrophe droite (') : {text} (source : {original})",
        "ellipsis": "Utiliser le caractère unique pour les points de suspension (…) : {text} (source : {original})",
        "opening_quote_space": "Espace insécable manquant après « : {text} (source : {original})",
        "etc_ellipsis": "Pas de points de suspension après \"etc.\" : {text} (source : {original})",
        "nbsp_percent": "Espace insécable manquant avant '%' : {text} (source : {original})",
        "glossary": "Le terme '{term}' devrait être traduit par '{renderings}' : {text}",
    },
)

RULE_SETS: Dict[str, TypographyRuleSet] = {
    FRENCH_RULES.language: FRENCH_RULES,
}


def get_rule_set(language: str, enabled_languages: Optional[Iterable[str]] = None) -> Optional[TypographyRuleSet]:
    """
    Return the rule set for ``language``, or None when the language has no
    rules or is not among ``enabled_languages``.
    """
    if enabled_languages is not None and language not in enabled_languages:
        return None
    return RULE_SETS.get(language)


@dataclass
class RuleResult:
    errors: List[str]
    fixed_text: str

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


# Each rule takes the current text and returns (messages, rewritten text).
Rule = Callable[[str, str, TypographyRuleSet], Tuple[List[str], str]]


def _url_spans(text: str) -> List[Tuple[int, int]]:
    return [match.span() for match in _URL.finditer(text)]


def _in_url(position: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)


def _nbsp_before_punctuation(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    errors = []
    for mark in rules.nbsp_punctuation:
        pattern = re.compile(r'\s*' + re.escape(mark))
        urls = _url_spans(text)
        positions = [m.end() - len(mark) for m in pattern.finditer(text)]
        if all(_in_url(pos, urls) or text[:pos].endswith(NBSP) for pos in positions):
            continue
        errors.append(rules.message("nbsp_before", mark=mark, text=text, original=original))
        text = pattern.sub(
            lambda m: m.group(0) if _in_url(m.end() - len(mark), urls) else NBSP + mark, text
        )
    return errors, text


def _straight_quotes(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    if not _STRAIGHT_QUOTED.search(text):
        return [], text
    fixed = _STRAIGHT_QUOTED.sub(
        lambda m: f"{rules.opening_quote}{NBSP}{m.group(1)}{NBSP}{rules.closing_quote}", text
    )
    return [rules.message("straight_quotes", text=text, original=original)], fixed


def _apostrophes(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    if "'" not in text:
        return [], text
    return [rules.message("apostrophe", text=text, original=original)], text.replace("'", rules.apostrophe)


def _ellipsis(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    if "..." not in text:
        return [], text
    return [rules.message("ellipsis", text=text, original=original)], text.replace("...", ELLIPSIS)


def _opening_quote_spacing(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    quote = re.escape(rules.opening_quote)
    if not re.search(quote + r'(?!' + NBSP + r')', text):
        return [], text
    fixed = re.sub(quote + r'\s*', rules.opening_quote + NBSP, text)
    return [rules.message("opening_quote_space", text=text, original=original)], fixed


def _no_ellipsis_after_etc(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    if not _ETC_ELLIPSIS.search(text):
        return [], text
    fixed = _ETC_ELLIPSIS.sub(lambda m: m.group(1) + ".", text)
    return [rules.message("etc_ellipsis", text=text, original=original)], fixed


def _nbsp_before_percent(text: str, original: str, rules: TypographyRuleSet) -> Tuple[List[str], str]:
    fired = False
    urls = _url_spans(text)

    def replace(match: re.Match) -> str:
        nonlocal fired
        token = match.group('token')
        if token not in ('%', '%%') or _in_url(match.start('token'), urls):
            return match.group(0)
        if match.start('token') == 0 or match.group('space') == NBSP:
            return match.group(0)
        fired = True
        return NBSP + token

    fixed = _PERCENT_TOKEN.sub(replace, text)
    if not fired:
        return [], text
    return [rules.message("nbsp_percent", text=text, original=original)], fixed


RULES: Tuple[Rule, ...] = (
    _nbsp_before_punctuation,
    _straight_quotes,
    _apostrophes,
    _ellipsis,
    _opening_quote_spacing,
    _no_ellipsis_after_etc,
    _nbsp_before_percent,
)


def process_string(text: str, original: str, rule_set: TypographyRuleSet = FRENCH_RULES) -> RuleResult:
    """
    Run every typography rule over a translated string.

    Rules run in order and each one inspects the output of the previous
    one, so the returned text carries all fixes at once.

    Args:
        text: The translated string to inspect.
        original: The source string, used only in error messages.
        rule_set: The conventions of the target language.

    Returns:
        RuleResult: The errors found and the fixed text. When no rule fired
        the fixed text is the input unchanged.
    """
    errors: List[str] = []
    fixed = text
    for rule in RULES:
        rule_errors, fixed = rule(fixed, original, rule_set)
        errors.extend(rule_errors)
    if not errors:
        return RuleResult(errors=[], fixed_text=text)
    return RuleResult(errors=errors, fixed_text=fixed)

import csv
import logging
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from translation_checker.exceptions import GlossaryError

logger = logging.getLogger(__name__)

DEFAULT_GLOSSARY_DIR = os.path.join(os.path.dirname(os.path.realpath(__file__)), 'glossaries')


@dataclass(frozen=True)
class GlossaryMapping:
    """
    Term to preferred renderings for one target language.

    Terms are unique case-insensitively; the spelling kept is the first one
    seen in the data. Every term has at least one rendering.
    """
    language: str
    terms: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        # Freeze whatever mapping was passed in
        if not isinstance(self.terms, MappingProxyType):
            object.__setattr__(self, 'terms', MappingProxyType(
                {term: tuple(renderings) for term, renderings in self.terms.items()}
            ))

    def __len__(self) -> int:
        return len(self.terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self.terms)

    def items(self):
        return self.terms.items()

    def applies_to(self, language: str) -> bool:
        return bool(self.terms) and self.language == language


def term_pattern(term: str) -> re.Pattern:
    """Case-insensitive whole-word pattern for a glossary term."""
    return re.compile(r'\b' + re.escape(term) + r'\b', re.IGNORECASE)


def term_occurs(term: str, text: str) -> bool:
    return term_pattern(term).search(text) is not None


def find_terms(original: str, glossary: GlossaryMapping) -> Dict[str, Tuple[str, ...]]:
    """
    Return the glossary terms that occur as whole words in ``original``.

    Args:
        original: The source string.
        glossary: The loaded glossary.

    Returns:
        Dict[str, Tuple[str, ...]]: The matching terms with their renderings, in glossary order.
    """
    return {term: renderings for term, renderings in glossary.items() if term_occurs(term, original)}


def parse_glossary_rows(rows: List[List[str]], language: str) -> GlossaryMapping:
    """
    Build a glossary from tabular rows of ``(term, rendering)``.

    The first row is a header and is discarded. A term appearing on several
    rows collects one rendering per row.
    """
    terms: Dict[str, List[str]] = {}
    canonical: Dict[str, str] = {}

    for row in rows[1:]:
        if len(row) < 2:
            continue
        term, rendering = row[0].strip(), row[1].strip()
        if not term or not rendering:
            continue
        key = canonical.setdefault(term.lower(), term)
        renderings = terms.setdefault(key, [])
        if rendering not in renderings:
            renderings.append(rendering)

    return GlossaryMapping(language=language, terms={t: tuple(r) for t, r in terms.items()})


def load_glossary(language: str, glossary_dir: Optional[str] = None) -> GlossaryMapping:
    """
    Load the glossary for a target language from ``<glossary_dir>/<language>.csv``.

    Args:
        language: The target language code (e.g., "fr").
        glossary_dir: Directory holding the CSV files; defaults to the bundled glossaries.

    Returns:
        GlossaryMapping: The loaded glossary, empty if no file exists for the language.

    Raises:
        GlossaryError: If the file exists but cannot be read or decoded.
    """
    directory = glossary_dir or DEFAULT_GLOSSARY_DIR
    glossary_file_path = os.path.join(directory, f"{language}.csv")

    if not os.path.exists(glossary_file_path):
        logger.info("No glossary found for language '%s' at '%s'.", language, glossary_file_path)
        return GlossaryMapping(language=language)

    try:
        with open(glossary_file_path, 'r', encoding='utf-8', newline='') as f:
            rows = list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise GlossaryError(f"Could not read glossary file '{glossary_file_path}': {exc}") from exc

    glossary = parse_glossary_rows(rows, language)
    logger.debug("Loaded %d glossary terms for '%s' from '%s'.", len(glossary), language, glossary_file_path)
    return glossary

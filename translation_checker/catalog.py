import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

import polib

from translation_checker.exceptions import CatalogError

GLOSSARY_REVIEW_PREFIX = "glossary-review:"
FUZZY_FLAG = "fuzzy"

_GLOSSARY_REVIEW_PATTERN = re.compile(r"^glossary-review:\s*'(?P<term>.+?)'\s*→\s*'(?P<renderings>.*)'\s*$")
# An entry with an empty msgid directly followed by msgstr is the metadata header
_HEADER_ENTRY = re.compile(r'^msgid ""[ \t]*\r?\nmsgstr\b', re.MULTILINE)
_EMPTY_HEADER = 'msgid ""\nmsgstr ""\n\n'


@dataclass(frozen=True)
class GlossaryReviewComment:
    """
    Structured form of a ``glossary-review`` translator comment.

    The rendered comment is the interchange format stored in the catalog:
    ``glossary-review: '<term>' → '<renderings>'``.
    """
    term: str
    renderings: str

    def render(self) -> str:
        return f"{GLOSSARY_REVIEW_PREFIX} '{self.term}' → '{self.renderings}'"

    @classmethod
    def parse(cls, text: str) -> Optional["GlossaryReviewComment"]:
        match = _GLOSSARY_REVIEW_PATTERN.match(text.strip())
        if not match:
            return None
        return cls(term=match.group('term'), renderings=match.group('renderings'))


class CatalogEntry:
    """
    A single source/translation pair of a catalog, with its flags and
    translator comments.

    Wraps a ``polib.POEntry`` and mutates it in place, so serializing the
    owning catalog reflects every change made through this object.
    """

    def __init__(self, po_entry: polib.POEntry):
        self._entry = po_entry

    @property
    def original(self) -> str:
        return self._entry.msgid

    @property
    def translation(self) -> str:
        if self._entry.msgid_plural:
            return self._entry.msgstr_plural.get(0, '')
        return self._entry.msgstr

    @translation.setter
    def translation(self, value: str) -> None:
        if self._entry.msgid_plural:
            self._entry.msgstr_plural[0] = value
        else:
            self._entry.msgstr = value

    @property
    def flags(self) -> Tuple[str, ...]:
        return tuple(self._entry.flags)

    def add_flag(self, flag: str) -> None:
        if flag not in self._entry.flags:
            self._entry.flags.append(flag)

    @property
    def comments(self) -> Tuple[str, ...]:
        if not self._entry.tcomment:
            return ()
        return tuple(self._entry.tcomment.split('\n'))

    def add_comment(self, comment: str) -> None:
        if comment in self.comments:
            return
        self._set_comments(list(self.comments) + [comment])

    def remove_comments(self, predicate: Callable[[str], bool]) -> int:
        """Drop every comment matching ``predicate``; returns how many were removed."""
        kept = [c for c in self.comments if not predicate(c)]
        removed = len(self.comments) - len(kept)
        if removed:
            self._set_comments(kept)
        return removed

    def glossary_reviews(self) -> List[GlossaryReviewComment]:
        reviews = []
        for comment in self.comments:
            parsed = GlossaryReviewComment.parse(comment)
            if parsed is not None:
                reviews.append(parsed)
        return reviews

    def has_glossary_review(self) -> bool:
        return any(c.strip().startswith(GLOSSARY_REVIEW_PREFIX) for c in self.comments)

    def clear_glossary_reviews(self) -> int:
        return self.remove_comments(lambda c: c.strip().startswith(GLOSSARY_REVIEW_PREFIX))

    def _set_comments(self, comments: List[str]) -> None:
        self._entry.tcomment = '\n'.join(comments)

    def __repr__(self) -> str:
        return f"CatalogEntry(original={self.original!r}, translation={self.translation!r})"


class Catalog:
    """An ordered gettext catalog."""

    def __init__(self, po_file: polib.POFile):
        self._po = po_file

    def entries(self) -> Iterator[CatalogEntry]:
        for po_entry in self._po:
            if po_entry.obsolete:
                continue
            yield CatalogEntry(po_entry)

    def __len__(self) -> int:
        return sum(1 for entry in self._po if not entry.obsolete)


def load(content: str) -> Catalog:
    """
    Parse PO content into a catalog.

    A catalog without a header gets an empty one first, otherwise polib
    would read the comments of the first entry as the file header.

    Args:
        content: The full text of a ``.po`` file.

    Returns:
        Catalog: The parsed catalog.

    Raises:
        CatalogError: If the content is not valid PO syntax.
    """
    if not _HEADER_ENTRY.search(content):
        content = _EMPTY_HEADER + content
    try:
        po_file = polib.pofile(content, encoding='utf-8')
    except (IOError, OSError, ValueError) as exc:
        raise CatalogError(f"Could not parse catalog: {exc}") from exc
    return Catalog(po_file)


def serialize(catalog: Catalog) -> str:
    """Render the catalog back to PO text."""
    return str(catalog._po)

import pytest

from translation_checker.catalog import GlossaryReviewComment
from translation_checker.glossary_checker import glossary_check
from translation_checker.glossary_store import GlossaryMapping


def _glossary(terms):
    return GlossaryMapping(language="fr", terms=terms)


@pytest.mark.parametrize("original, translation, terms, count, message", [
    ("archive", "Compress", {"archive": ["archive ou archiver"]}, 1,
     "Le terme 'archive' devrait être traduit par 'archive ou archiver'"),
    ("set", "définir", {"set up": ["configurer"]}, 0, None),
    ("set up", "définir", {"set up": ["configurer"]}, 1,
     "Le terme 'set up' devrait être traduit par 'configurer'"),
    # no "preset" in the glossary, only "set"
    ("preset", "réglage", {"set": ["définir"]}, 0, None),
])
def test_glossary_term_consistency(original, translation, terms, count, message):
    result = glossary_check(original, translation, _glossary(terms))
    assert len(result.warnings) == count
    assert len(result.comments) == count
    if message:
        assert message in result.warnings[0]


def test_any_rendering_satisfies_the_term(french_glossary):
    result = glossary_check("Please archive your documents", "Veuillez ARCHIVER vos documents", french_glossary)
    assert result.warnings == []
    assert result.comments == []


def test_warning_names_all_renderings_and_translation(french_glossary):
    result = glossary_check("Please archive your documents", "Veuillez compresser vos documents", french_glossary)
    assert result.warnings == [
        "Le terme 'archive' devrait être traduit par 'archive ou archiver' : Veuillez compresser vos documents"
    ]
    assert result.comments == ["glossary-review: 'archive' → 'archive ou archiver'"]


def test_comment_round_trips_as_structured_record(french_glossary):
    result = glossary_check("Open the settings", "Ouvrir la configuration", french_glossary)
    review = GlossaryReviewComment.parse(result.comments[0])
    assert review == GlossaryReviewComment(term="settings", renderings="réglages ou paramètres")


def test_one_warning_per_unsatisfied_term(french_glossary):
    result = glossary_check(
        "Set up the preset and archive the settings",
        "Configurer le préréglage et compresser les options",
        french_glossary
    )
    assert len(result.warnings) == 2
    assert "'archive'" in result.warnings[0]
    assert "'settings'" in result.warnings[1]

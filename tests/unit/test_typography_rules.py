import unittest

from translation_checker.typography_rules import (
    ELLIPSIS,
    FRENCH_RULES,
    NBSP,
    RULE_SETS,
    get_rule_set,
    process_string
)


class TestTypographyRules(unittest.TestCase):

    def test_clean_string_is_returned_unchanged(self):
        text = "En quelques étapes, vous répondrez sans effort à toutes les réglementations."
        result = process_string(text, "In just a few steps")
        self.assertEqual(result.errors, [])
        self.assertEqual(result.fixed_text, text)
        self.assertFalse(result.has_errors)

    def test_missing_nbsp_before_exclamation(self):
        result = process_string("Bonjour!", "Hello!")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Espace insécable manquant avant '!'", result.errors[0])
        self.assertEqual(result.fixed_text, "Bonjour" + NBSP + "!")

    def test_regular_space_before_punctuation_is_replaced(self):
        result = process_string("Questions et réponses :", "Questions and answers:")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.fixed_text, "Questions et réponses" + NBSP + ":")

    def test_one_error_per_punctuation_mark(self):
        result = process_string("Vraiment? Oui!", "Really? Yes!")
        self.assertEqual(len(result.errors), 2)
        self.assertEqual(result.fixed_text, "Vraiment" + NBSP + "? Oui" + NBSP + "!")

    def test_existing_nbsp_is_accepted(self):
        text = "Attention" + NBSP + ": fichier manquant"
        result = process_string(text, "Warning: missing file")
        self.assertEqual(result.errors, [])

    def test_straight_quotes_become_french_quotes(self):
        result = process_string('Il a dit "bonjour" à tout le monde', 'He said "hello" to everyone')
        self.assertEqual(len(result.errors), 1)
        self.assertIn("guillemets français", result.errors[0])
        self.assertEqual(result.fixed_text, "Il a dit «" + NBSP + "bonjour" + NBSP + "» à tout le monde")

    def test_apostrophes(self):
        result = process_string("Le guide de l'utilisateur", "The user's guide")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("apostrophe typographique", result.errors[0])
        self.assertEqual(result.fixed_text, "Le guide de l’utilisateur")

    def test_ellipsis(self):
        result = process_string("Ceci est un test...", "This is a test...")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("caractère unique pour les points de suspension", result.errors[0])
        self.assertEqual(result.fixed_text, "Ceci est un test" + ELLIPSIS)

    def test_no_ellipsis_after_etc(self):
        result = process_string("Par exemple, pommes, etc...", "For example, apples, etc...")
        self.assertEqual(len(result.errors), 2)
        self.assertIn("Utiliser le caractère unique pour les points de suspension", result.errors[0])
        self.assertIn('Pas de points de suspension après "etc."', result.errors[1])
        self.assertEqual(result.fixed_text, "Par exemple, pommes, etc.")

    def test_etc_followed_by_ellipsis_glyph(self):
        result = process_string("pommes, poires, etc…", "apples, pears, etc…")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.fixed_text, "pommes, poires, etc.")

    def test_opening_quote_without_space(self):
        result = process_string("Cliquez sur «Enregistrer" + NBSP + "»", "Click on “Save”")
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Espace insécable manquant après «", result.errors[0])
        self.assertEqual(result.fixed_text, "Cliquez sur «" + NBSP + "Enregistrer" + NBSP + "»")

    def test_percent_sign(self):
        result = process_string("Remise de 20 %", "20% off")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.fixed_text, "Remise de 20" + NBSP + "%")

    def test_printf_placeholders_are_not_percent_signs(self):
        for text in ("Bonjour %s", "%d éléments", "Page %1$s sur %2$d", "Bonjour %(name)s"):
            with self.subTest(text=text):
                self.assertEqual(process_string(text, "source").errors, [])

    def test_urls_are_left_alone(self):
        for text in ("Voir https://exemple.fr", "Aide : https://exemple.fr/page?id=1&q=a%20b"):
            with self.subTest(text=text):
                result = process_string(text, "See the docs")
                self.assertIn("https://exemple.fr", result.fixed_text)
                self.assertNotIn(NBSP + "?id", result.fixed_text)
                self.assertNotIn(NBSP + "%20", result.fixed_text)

    def test_punctuation_next_to_a_url_is_still_fixed(self):
        result = process_string("Voir https://exemple.fr ou ailleurs!", "See https://exemple.fr or elsewhere!")
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.fixed_text, "Voir https://exemple.fr ou ailleurs" + NBSP + "!")

    def test_fixes_compose(self):
        result = process_string('Il a dit "c\'est fini"...', 'He said "it\'s over"...')
        self.assertEqual(len(result.errors), 3)
        self.assertEqual(
            result.fixed_text,
            "Il a dit «" + NBSP + "c’est fini" + NBSP + "»" + ELLIPSIS
        )

    def test_fixed_output_is_idempotent(self):
        samples = [
            "Bonjour!",
            'Il a dit "bonjour" à tout le monde',
            "Le guide de l'utilisateur...",
            "Par exemple, pommes, etc...",
            "Cliquez sur «Enregistrer»",
            "Remise de 20% : profitez-en!",
            "Quoi?! Vraiment ; ça",
        ]
        for sample in samples:
            with self.subTest(sample=sample):
                fixed = process_string(sample, "source").fixed_text
                second = process_string(fixed, "source")
                self.assertEqual(second.errors, [])
                self.assertEqual(second.fixed_text, fixed)

    def test_ellipsis_property(self):
        samples = ["Chargement...", "Attendez... encore", "un, deux, etc...", "etc... et plus..."]
        for sample in samples:
            with self.subTest(sample=sample):
                fixed = process_string(sample, "source").fixed_text
                self.assertNotIn("...", fixed)
                self.assertNotIn("etc" + ELLIPSIS, fixed)

    def test_original_only_used_in_messages(self):
        first = process_string("Bonjour!", "Hello!")
        second = process_string("Bonjour!", "Hi there!")
        self.assertEqual(first.fixed_text, second.fixed_text)
        self.assertIn("Hello!", first.errors[0])


class TestRuleSetLookup(unittest.TestCase):

    def test_french_is_registered(self):
        self.assertIs(RULE_SETS["fr"], FRENCH_RULES)
        self.assertIs(get_rule_set("fr"), FRENCH_RULES)

    def test_unknown_language_has_no_rules(self):
        self.assertIsNone(get_rule_set("es"))

    def test_disabled_language_has_no_rules(self):
        self.assertIsNone(get_rule_set("fr", enabled_languages=["de"]))


if __name__ == '__main__':
    unittest.main()

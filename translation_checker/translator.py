import enum
import logging
import os
import shlex
import subprocess
import tempfile
from dataclasses import dataclass
from typing import Dict, Mapping, NamedTuple, Optional, Tuple, Union

from translation_checker.app_config import DEFAULT_LANGUAGE_NAMES
from translation_checker.catalog import FUZZY_FLAG
from translation_checker.exceptions import InteractionError
from translation_checker.glossary_store import GlossaryMapping, find_terms
from translation_checker.translation_engines import TranslationEngine

logger = logging.getLogger(__name__)

STOP_FLAG = "stop"
UNKNOWN_LANGUAGE = "Unknown"

SYSTEM_PROMPT = (
    "Translate the following English text to {target_language}, maintaining the original tone and formatting.\n"
    "Focus on accuracy and cultural context. Don't add or remove any information.\n"
    "Preserve placeholders (like %s, %d, %1$s, {{0}}) and HTML tags exactly as they appear.\n"
    "CRITICAL: ANSWER WITH THE TRANSLATION ONLY. NO EXPLANATIONS, NO FORMATTING, NO ADDITIONAL TEXT.\n"
    "Just return the translated text without any prefix, suffix, quotes, or commentary."
)
GLOSSARY_INTRODUCTION = "Use these exact translations for the specified terms :"


class TranslationOutcome(NamedTuple):
    text: Optional[str]
    flag: Optional[str]


@dataclass(frozen=True)
class NotConfigured:
    pass


@dataclass(frozen=True)
class Failure:
    reason: str


@dataclass(frozen=True)
class Success:
    text: str


EngineResult = Union[NotConfigured, Failure, Success]


class ReviewDecision(enum.Enum):
    ACCEPTED = "accepted"
    ACCEPTED_NEEDS_REVIEW = "accepted_needs_review"
    REJECTED = "rejected"
    STOPPED = "stopped"
    EDITED_ACCEPTED = "edited_accepted"


# ANSI styles for the review prompt
_YELLOW = "\033[1;33m"
_GREEN = "\033[1;32m"
_RED = "\033[1;31m"
_CYAN = "\033[1;36m"
_MAGENTA = "\033[1;35m"
_WHITE = "\033[1;37m"
_RESET = "\033[0m"


class ConsoleInteraction:
    """Human interaction channel backed by stdin/stdout and ``$EDITOR``."""

    def __init__(self, editor: Optional[str] = None):
        self.editor = editor or os.environ.get('EDITOR') or 'nano'

    def read_line(self) -> str:
        try:
            return input()
        except EOFError as exc:
            raise InteractionError("Failed to read from stdin: input stream is closed") from exc
        except OSError as exc:
            raise InteractionError(f"Failed to read from stdin: {exc}") from exc

    def write(self, text: str) -> None:
        print(text, end='', flush=True)

    def open_external_editor(self, initial_text: str) -> Optional[str]:
        """
        Let the user edit ``initial_text`` in their editor.

        Returns:
            Optional[str]: The edited text, or None if the editor could not be run.
        """
        fd, temp_file_path = tempfile.mkstemp(prefix='translation_', suffix='.txt')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as temp_f:
                temp_f.write(initial_text)
            try:
                subprocess.run(shlex.split(self.editor) + [temp_file_path], check=True)
            except (OSError, subprocess.CalledProcessError) as exc:
                logger.error("Editor '%s' failed: %s", self.editor, exc)
                return None
            with open(temp_file_path, 'r', encoding='utf-8') as temp_f:
                return temp_f.read()
        finally:
            try:
                os.remove(temp_file_path)
            except OSError as _e:
                logger.warning("Could not delete temporary edit file '%s': %s", temp_file_path, _e)


def language_code_to_name(language_code: str, language_names: Optional[Mapping[str, str]] = None) -> str:
    """
    Convert a language code to a language name.

    Args:
        language_code (str): The language code (e.g., "fr").
        language_names: The code to name table; defaults to the built-in table.

    Returns:
        str: The language name, or "Unknown" for unrecognized codes.
    """
    table = DEFAULT_LANGUAGE_NAMES if language_names is None else language_names
    return table.get(language_code, UNKNOWN_LANGUAGE)


def build_system_prompt(target_language_name: str, relevant_terms: Mapping[str, Tuple[str, ...]]) -> str:
    """Fill the prompt template and append the glossary directives, if any."""
    system_prompt = SYSTEM_PROMPT.format(target_language=target_language_name)
    if relevant_terms:
        lines = [f"- {term} -> {' or '.join(renderings)}" for term, renderings in relevant_terms.items()]
        system_prompt += "\n" + GLOSSARY_INTRODUCTION + "\n" + "\n".join(lines) + "\n"
    return system_prompt


def decide(response: str) -> Optional[ReviewDecision]:
    """Map one line of reviewer input to a decision; 'e' (edit) maps to None."""
    choice = response.strip().lower()
    if choice in ('', 'y'):
        return ReviewDecision.ACCEPTED
    if choice == 'w':
        return ReviewDecision.ACCEPTED_NEEDS_REVIEW
    if choice == 's':
        return ReviewDecision.STOPPED
    if choice == 'e':
        return None
    return ReviewDecision.REJECTED


class Translator:
    """
    Requests machine translations for catalog entries and, in interactive
    mode, lets a human accept, flag, edit or reject each suggestion.
    """

    def __init__(
            self,
            engine: Optional[TranslationEngine] = None,
            interactive: bool = False,
            interaction: Optional[ConsoleInteraction] = None,
            language_names: Optional[Mapping[str, str]] = None
    ):
        self.engine = engine
        self.interactive = interactive
        self.interaction = interaction or ConsoleInteraction()
        self.language_names = language_names

    def suggest(self, original: str, system_prompt: str) -> EngineResult:
        """Ask the engine for a translation; engine exceptions become ``Failure``."""
        if self.engine is None:
            return NotConfigured()
        try:
            return Success(self.engine.translate(original, system_prompt).strip())
        except Exception as exc:
            logger.error("Translation failed for '%s': %s", original, exc)
            return Failure(str(exc))

    def translate(
            self,
            original: str,
            target_lang: str = 'fr',
            glossary: Optional[GlossaryMapping] = None
    ) -> Optional[TranslationOutcome]:
        """
        Translate a source string into ``target_lang``.

        Glossary terms found in ``original`` are added to the prompt, but only
        when the glossary was loaded for ``target_lang``.

        Args:
            original: The source text.
            target_lang: The target language code.
            glossary: The glossary loaded for this run.

        Returns:
            Optional[TranslationOutcome]: None when no engine is configured,
            otherwise the (text, flag) pair. A failed engine call yields (None, None).
        """
        relevant_terms: Dict[str, Tuple[str, ...]] = {}
        if glossary is not None and glossary.applies_to(target_lang):
            relevant_terms = find_terms(original, glossary)

        language_name = language_code_to_name(target_lang, self.language_names)
        system_prompt = build_system_prompt(language_name, relevant_terms)

        result = self.suggest(original, system_prompt)
        if isinstance(result, NotConfigured):
            return None
        if isinstance(result, Failure):
            return TranslationOutcome(None, None)

        if not result.text:
            return TranslationOutcome(None, None)
        if self.interactive:
            return self.review(original, result.text, relevant_terms)
        return TranslationOutcome(result.text, None)

    def review(
            self,
            original: str,
            suggested: str,
            relevant_terms: Optional[Mapping[str, Tuple[str, ...]]] = None
    ) -> TranslationOutcome:
        """
        Show a suggestion to the reviewer and encode their single answer.

        Raises:
            InteractionError: If the reviewer's input cannot be read.
        """
        self.interaction.write(self._render_prompt(original, suggested, relevant_terms or {}))
        decision = decide(self.interaction.read_line())

        if decision is None:
            edited = self.interaction.open_external_editor(suggested)
            edited = edited.strip() if edited else ''
            decision = ReviewDecision.EDITED_ACCEPTED if edited else ReviewDecision.REJECTED
            if edited:
                suggested = edited

        logger.debug("Review decision for '%s': %s", original, decision.value)

        if decision in (ReviewDecision.ACCEPTED, ReviewDecision.EDITED_ACCEPTED):
            return TranslationOutcome(suggested, None)
        if decision is ReviewDecision.ACCEPTED_NEEDS_REVIEW:
            return TranslationOutcome(suggested, FUZZY_FLAG)
        if decision is ReviewDecision.STOPPED:
            return TranslationOutcome(None, STOP_FLAG)
        return TranslationOutcome(None, None)

    @staticmethod
    def _render_prompt(original: str, suggested: str, relevant_terms: Mapping[str, Tuple[str, ...]]) -> str:
        parts = [f"\n{_YELLOW}Original :{_RESET}\n{_YELLOW}=========={_RESET}\n{_WHITE}{original}{_RESET}\n\n"]
        if relevant_terms:
            parts.append(f"{_YELLOW}Glossary :{_RESET}\n{_YELLOW}=========={_RESET}\n{_WHITE}")
            for term, renderings in relevant_terms.items():
                parts.append(f"- {term} -> {' or '.join(renderings)}\n")
            parts.append(f"{_RESET}\n")
        parts.append(
            f"{_GREEN}Suggested translation :{_RESET}\n{_GREEN}======================={_RESET}\n"
            f"{_WHITE}{suggested}{_RESET}\n\n"
        )
        parts.append(
            f"{_CYAN}Choose an action:{_RESET}\n"
            f"{_WHITE}[{_GREEN}Y{_WHITE}] Accept translation\n"
            f"[{_YELLOW}W{_WHITE}] Accept but needs review later\n"
            f"[{_RED}N{_WHITE}] Reject translation\n"
            f"[{_CYAN}E{_WHITE}] Edit in default editor\n"
            f"[{_MAGENTA}S{_WHITE}] Stop translation and continue later (changes so far are saved)\n"
            f"\nYour choice (Y/W/N/E/S) [Y]: {_RESET}"
        )
        return "".join(parts)

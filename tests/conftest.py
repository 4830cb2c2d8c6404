import logging
import textwrap
from typing import List, Optional

import pytest

from translation_checker.exceptions import EngineError, InteractionError
from translation_checker.glossary_store import GlossaryMapping
from translation_checker.translation_engines import TranslationEngine


class FakeEngine(TranslationEngine):
    """Engine returning canned responses and recording every call."""

    def __init__(self, responses: Optional[dict] = None, default: Optional[str] = None, error: Optional[Exception] = None):
        self.responses = responses or {}
        self.default = default
        self.error = error
        self.calls: List[tuple] = []

    def translate(self, text: str, system_prompt: str) -> str:
        self.calls.append((text, system_prompt))
        if self.error is not None:
            raise self.error
        if text in self.responses:
            return self.responses[text]
        if self.default is not None:
            return self.default
        raise EngineError(f"No canned response for {text!r}")

    def verify_engine(self) -> None:
        return None


class ScriptedInteraction:
    """Interaction channel replaying scripted reviewer answers."""

    def __init__(self, answers: List[str], edited_text: Optional[str] = None):
        self.answers = list(answers)
        self.edited_text = edited_text
        self.output: List[str] = []
        self.edited: List[str] = []

    def read_line(self) -> str:
        if not self.answers:
            raise InteractionError("Failed to read from stdin: input stream is closed")
        return self.answers.pop(0)

    def write(self, text: str) -> None:
        self.output.append(text)

    def open_external_editor(self, initial_text: str) -> Optional[str]:
        self.edited.append(initial_text)
        return self.edited_text


@pytest.fixture
def french_glossary():
    return GlossaryMapping(language="fr", terms={
        "archive": ("archive", "archiver"),
        "set up": ("configurer",),
        "preset": ("préréglage",),
        "settings": ("réglages", "paramètres"),
    })


@pytest.fixture
def fake_engine():
    return FakeEngine


@pytest.fixture
def scripted_interaction():
    return ScriptedInteraction


@pytest.fixture
def po():
    """Dedent an inline PO snippet."""
    def _po(text: str) -> str:
        return textwrap.dedent(text).lstrip()
    return _po


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers a CLI test may have installed on the package logger."""
    yield
    logger = logging.getLogger("translation_checker")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
